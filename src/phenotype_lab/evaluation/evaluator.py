"""Cluster-to-phenotype evaluation: purity plus standard external metrics."""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics import (
    normalized_mutual_info_score, adjusted_rand_score,
    homogeneity_score, completeness_score, v_measure_score,
    silhouette_score,
)
from sklearn.metrics.cluster import contingency_matrix
from scipy.optimize import linear_sum_assignment

from ..core.errors import ConfigurationError
from ..core.types import ClusterAssignment

logger = logging.getLogger(__name__)


@dataclass
class ClusterMetrics:
    """Container for one strategy's clustering evaluation."""
    purity: float = 0.0
    nmi: float = 0.0
    ari: float = 0.0
    homogeneity: float = 0.0
    completeness: float = 0.0
    v_measure: float = 0.0
    hungarian_accuracy: float = 0.0
    silhouette: Optional[float] = None
    num_clusters: int = 0
    num_samples: int = 0


def majority_classes(pairs: Iterable[Tuple[int, int]]) -> Dict[int, int]:
    """Most frequent ground-truth class per cluster.

    Ties go to the smallest class id.
    """
    counts: Dict[int, Counter] = defaultdict(Counter)
    for cluster_id, true_class in pairs:
        counts[cluster_id][true_class] += 1
    return {
        cluster_id: min(c, key=lambda cls: (-c[cls], cls))
        for cluster_id, c in sorted(counts.items())
    }


def purity(pairs: Sequence[Tuple[int, int]]) -> float:
    """Fraction of items whose cluster's majority class equals their own class.

    Args:
        pairs: (cluster_id, true_class) tuples

    Raises:
        ConfigurationError: if pairs is empty
    """
    pairs = list(pairs)
    if not pairs:
        raise ConfigurationError("Purity is undefined for an empty assignment set")
    counts: Dict[int, Counter] = defaultdict(Counter)
    for cluster_id, true_class in pairs:
        counts[cluster_id][true_class] += 1
    majority_total = sum(max(c.values()) for c in counts.values())
    return majority_total / len(pairs)


def join_assignments(
    assignments: Iterable[ClusterAssignment | Tuple[str, int]],
    labels: Mapping[str, int],
) -> List[Tuple[int, int]]:
    """Inner-join cluster assignments with ground-truth labels on patient id.

    Patients present on only one side are excluded. Output is ordered by
    patient id.

    Returns:
        (cluster_id, true_class) pairs

    Raises:
        ConfigurationError: if a patient id is assigned more than once
    """
    by_patient = {}
    for pid, cid in assignments:
        pid = str(pid)
        if pid in by_patient:
            raise ConfigurationError(f"Duplicate cluster assignment for patient {pid}")
        by_patient[pid] = int(cid)
    labels = {str(pid): int(cls) for pid, cls in labels.items()}
    shared = sorted(by_patient.keys() & labels.keys())

    unlabeled = len(by_patient) - len(shared)
    unassigned = len(labels) - len(shared)
    if unlabeled or unassigned:
        logger.warning(
            "Join dropped %d assigned patient(s) without a label and "
            "%d labeled patient(s) without an assignment",
            unlabeled, unassigned,
        )
    return [(by_patient[pid], labels[pid]) for pid in shared]


def compute_cluster_metrics(
    cluster_labels: np.ndarray,
    true_labels: np.ndarray,
    features: Optional[np.ndarray] = None,
) -> ClusterMetrics:
    """Compute clustering quality metrics against ground truth.

    Args:
        cluster_labels: (N,) predicted cluster assignments
        true_labels: (N,) ground truth classes
        features: (N, D) feature vectors for silhouette (optional)
    """
    cluster_labels = np.asarray(cluster_labels)
    true_labels = np.asarray(true_labels)
    if cluster_labels.shape != true_labels.shape:
        raise ConfigurationError(
            f"{cluster_labels.size} cluster labels for {true_labels.size} true labels"
        )

    n_clusters = len(set(cluster_labels.tolist()))
    metrics = ClusterMetrics(
        purity=purity(list(zip(cluster_labels.tolist(), true_labels.tolist()))),
        nmi=normalized_mutual_info_score(true_labels, cluster_labels),
        ari=adjusted_rand_score(true_labels, cluster_labels),
        homogeneity=homogeneity_score(true_labels, cluster_labels),
        completeness=completeness_score(true_labels, cluster_labels),
        v_measure=v_measure_score(true_labels, cluster_labels),
        hungarian_accuracy=_hungarian_accuracy(true_labels, cluster_labels),
        num_clusters=n_clusters,
        num_samples=len(true_labels),
    )

    # Internal metric (needs features)
    if features is not None and 1 < n_clusters < len(features):
        metrics.silhouette = float(silhouette_score(features, cluster_labels))

    return metrics


def _hungarian_accuracy(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Optimal 1:1 cluster-to-class matching; unmatched clusters count as wrong."""
    # rows: classes, columns: clusters
    table = contingency_matrix(y_true, y_pred)
    rows, cols = linear_sum_assignment(table, maximize=True)
    return float(table[rows, cols].sum() / table.sum())


class Evaluator:
    """Scores cluster assignments against phenotype labels.

    Usage:
        evaluator = Evaluator(labels)
        metrics = evaluator.evaluate_assignments(assignments)
        evaluator.print_report(metrics, name='NMF')
    """

    def __init__(self, labels: Mapping[str, int]):
        self.labels = labels

    def evaluate_assignments(self, assignments, features=None) -> ClusterMetrics:
        """Join on patient id, then score the shared patients.

        Args:
            assignments: iterable of (patient_id, cluster_id)
            features: optional {patient_id: vector} for silhouette
        """
        assignments = list(assignments)
        pairs = join_assignments(assignments, self.labels)
        if not pairs:
            raise ConfigurationError("No patient is both assigned and labeled")
        cluster_labels, true_labels = (np.array(x) for x in zip(*pairs))

        feats = None
        if features is not None:
            shared = sorted({str(pid) for pid, _ in assignments} & {str(p) for p in self.labels})
            feats = np.array([features[pid] for pid in shared])
        return compute_cluster_metrics(cluster_labels, true_labels, feats)

    def print_report(self, metrics: ClusterMetrics, name: str = "") -> str:
        """Format metrics as a readable report string."""
        prefix = f"{name} " if name else ""
        lines = [
            f"{prefix}Purity: {metrics.purity:.5f}",
            f"{prefix}NMI: {metrics.nmi:.4f}",
            f"{prefix}ARI: {metrics.ari:.4f}",
            f"{prefix}V-Measure: {metrics.v_measure:.4f}",
            f"{prefix}Hungarian Accuracy: {metrics.hungarian_accuracy:.4f}",
            f"{prefix}Clusters: {metrics.num_clusters} over {metrics.num_samples} patients",
        ]
        if metrics.silhouette is not None:
            lines.append(f"{prefix}Silhouette: {metrics.silhouette:.4f}")
        report = '\n'.join(lines)
        print(report)
        return report
