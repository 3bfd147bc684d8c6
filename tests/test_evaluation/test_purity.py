"""Tests for purity, majority selection and the label join."""
import numpy as np
import pytest

from phenotype_lab.core import ClusterAssignment, ConfigurationError
from phenotype_lab.evaluation import (
    Evaluator,
    compute_cluster_metrics,
    join_assignments,
    majority_classes,
    purity,
)

A, B = 1, 2


class TestPurity:
    def test_reference_example(self):
        pairs = [(0, A), (0, A), (0, B), (1, B), (1, B)]
        assert purity(pairs) == pytest.approx(0.8)

    def test_homogeneous_clusters(self):
        assert purity([(0, 1), (0, 1), (1, 2), (2, 3)]) == 1.0

    def test_single_cluster_is_majority_fraction(self):
        pairs = [(0, 1)] * 3 + [(0, 2)] * 5 + [(0, 3)] * 2
        assert purity(pairs) == pytest.approx(0.5)

    def test_singletons_are_pure(self):
        assert purity([(i, i % 3) for i in range(7)]) == 1.0

    def test_empty_is_an_error(self):
        with pytest.raises(ConfigurationError):
            purity([])

    def test_bounds_on_random_input(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            n = int(rng.integers(1, 50))
            pairs = list(zip(rng.integers(0, 5, n).tolist(), rng.integers(1, 4, n).tolist()))
            p = purity(pairs)
            assert 0.0 < p <= 1.0

    def test_accepts_generator(self):
        assert purity((c, c) for c in range(3)) == 1.0


class TestMajorityClasses:
    def test_majority(self):
        pairs = [(0, A), (0, A), (0, B), (1, B), (1, B)]
        assert majority_classes(pairs) == {0: A, 1: B}

    def test_tie_goes_to_smallest_class(self):
        pairs = [(0, 3), (0, 2), (1, 2), (1, 1), (1, 3)]
        assert majority_classes(pairs) == {0: 2, 1: 1}


class TestJoin:
    def test_inner_join_on_patient_id(self, caplog):
        assignments = [
            ClusterAssignment("p1", 0),
            ClusterAssignment("p2", 1),
            ClusterAssignment("p9", 1),  # no label
        ]
        labels = {"p1": A, "p2": B, "p3": A}  # p3 never assigned
        with caplog.at_level("WARNING"):
            pairs = join_assignments(assignments, labels)
        assert pairs == [(0, A), (1, B)]
        assert "dropped 1 assigned" in caplog.text

    def test_ordered_by_patient_id(self):
        pairs = join_assignments([("b", 1), ("a", 0)], {"a": 5, "b": 6})
        assert pairs == [(0, 5), (1, 6)]

    def test_disjoint_keys(self):
        assert join_assignments([("a", 0)], {"b": 1}) == []

    def test_duplicate_patient_rejected(self):
        with pytest.raises(ConfigurationError, match="p1"):
            join_assignments([("p1", 0), ("p2", 1), ("p1", 1)], {"p1": A, "p2": B})


class TestClusterMetrics:
    def test_perfect_clustering(self):
        m = compute_cluster_metrics(np.array([0, 0, 1, 1]), np.array([1, 1, 2, 2]))
        assert m.purity == 1.0
        assert m.nmi == pytest.approx(1.0)
        assert m.ari == pytest.approx(1.0)
        assert m.hungarian_accuracy == pytest.approx(1.0)
        assert m.num_clusters == 2
        assert m.num_samples == 4
        assert m.silhouette is None

    def test_hungarian_leaves_extra_cluster_unmatched(self):
        m = compute_cluster_metrics(np.array([0, 0, 1, 2]), np.array([1, 1, 2, 2]))
        assert m.hungarian_accuracy == pytest.approx(0.75)
        assert m.purity == 1.0

    def test_hungarian_with_more_classes_than_clusters(self):
        m = compute_cluster_metrics(np.array([0, 0, 0, 1]), np.array([1, 1, 3, 2]))
        assert m.hungarian_accuracy == pytest.approx(0.75)

    def test_silhouette_with_features(self):
        feats = np.array([[0.0], [0.1], [5.0], [5.1]])
        m = compute_cluster_metrics(np.array([0, 0, 1, 1]), np.array([1, 1, 2, 2]), feats)
        assert m.silhouette > 0.9

    def test_shape_mismatch(self):
        with pytest.raises(ConfigurationError):
            compute_cluster_metrics(np.array([0, 1]), np.array([1]))


class TestEvaluator:
    def test_evaluate_assignments(self):
        labels = {"p1": A, "p2": A, "p3": B, "p4": B, "p5": B, "p6": A}
        assignments = [("p1", 0), ("p2", 0), ("p3", 0), ("p4", 1), ("p5", 1)]
        metrics = Evaluator(labels).evaluate_assignments(assignments)
        assert metrics.purity == pytest.approx(0.8)
        assert metrics.num_samples == 5

    def test_no_overlap_is_an_error(self):
        with pytest.raises(ConfigurationError):
            Evaluator({"a": 1}).evaluate_assignments([("b", 0)])

    def test_print_report(self, capsys):
        metrics = compute_cluster_metrics(np.array([0, 0, 1]), np.array([1, 1, 2]))
        report = Evaluator({}).print_report(metrics, name="NMF")
        assert "NMF Purity: 1.00000" in report
        assert "NMF Purity" in capsys.readouterr().out
