"""Tests for core data types."""
import numpy as np
import pytest

from phenotype_lab.core import (
    ConfigurationError,
    FactorMatrices,
    FeatureMatrix,
    PhenotypeClass,
    partition_rows,
)


class TestFeatureMatrix:
    def test_from_mapping_sorted_by_id(self):
        m = FeatureMatrix.from_mapping({"p2": [3.0, 4.0], "p1": [1.0, 2.0]})
        assert list(m.patient_ids) == ["p1", "p2"]
        np.testing.assert_allclose(m.values, [[1, 2], [3, 4]])
        assert m.shape == (2, 2)

    def test_ragged_mapping_rejected(self):
        with pytest.raises(ConfigurationError):
            FeatureMatrix.from_mapping({"a": [1.0], "b": [1.0, 2.0]})

    def test_empty_mapping_rejected(self):
        with pytest.raises(ConfigurationError):
            FeatureMatrix.from_mapping({})

    def test_id_count_mismatch(self):
        with pytest.raises(ConfigurationError):
            FeatureMatrix(np.array(["a"]), np.zeros((2, 3)))

    def test_duplicate_ids(self):
        with pytest.raises(ConfigurationError):
            FeatureMatrix(np.array(["a", "a"]), np.zeros((2, 3)))

    def test_nan_rejected(self):
        with pytest.raises(ConfigurationError):
            FeatureMatrix(np.array(["a"]), np.array([[np.nan, 1.0]]))

    def test_partition_preserves_order(self):
        values = np.arange(20, dtype=float).reshape(10, 2)
        m = FeatureMatrix(np.arange(10), values)
        blocks = m.partition(3)
        assert len(blocks) == 3
        np.testing.assert_array_equal(np.concatenate(blocks), values)

    def test_partition_capped_at_rows(self):
        m = FeatureMatrix(np.array(["a", "b"]), np.ones((2, 2)))
        assert len(m.partition(8)) == 2

    def test_partition_invalid_count(self):
        m = FeatureMatrix(np.array(["a", "b"]), np.ones((2, 2)))
        with pytest.raises(ConfigurationError):
            m.partition(0)

    def test_partition_rows_aligns_by_row_count(self):
        V = np.arange(30, dtype=float).reshape(10, 3)
        W = np.arange(20, dtype=float).reshape(10, 2)
        v_sizes = [b.shape[0] for b in partition_rows(V, 4)]
        w_sizes = [b.shape[0] for b in partition_rows(W, 4)]
        assert v_sizes == w_sizes == [3, 3, 2, 2]

    def test_with_values_keeps_ids(self):
        m = FeatureMatrix(np.array(["a", "b"]), np.ones((2, 4)))
        reduced = m.with_values(np.zeros((2, 1)))
        assert list(reduced.patient_ids) == ["a", "b"]
        assert reduced.num_features == 1


class TestFactorMatrices:
    def test_unpacks_as_pair(self):
        f = FactorMatrices(W=np.ones((4, 2)), H=np.ones((2, 3)))
        W, H = f
        assert W.shape == (4, 2)
        assert H.shape == (2, 3)
        assert f.rank == 2


def test_phenotype_codes():
    assert [int(c) for c in PhenotypeClass] == [1, 2, 3]
