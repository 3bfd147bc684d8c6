"""Clustering strategies and hard-assignment normalization.

Every strategy returns one ClusterAssignment (patient_id, cluster_id) per row:
    kmeans  sklearn KMeans on the reduced features
    gmm     sklearn GaussianMixture on the reduced features
    nmf     arg-max of the NMF membership matrix W
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Sequence

import numpy as np
from sklearn.cluster import KMeans
from sklearn.mixture import GaussianMixture

from ...core.errors import ConfigurationError
from ...core.types import ClusterAssignment, FeatureMatrix
from .nmf import NMF

logger = logging.getLogger(__name__)


def assign_from_nmf(W: np.ndarray, patient_ids: Sequence[str]) -> List[ClusterAssignment]:
    """Hard-assign each row of W to its largest factor (ties -> lowest index)."""
    W = np.asarray(W)
    if W.ndim != 2 or W.shape[0] != len(patient_ids):
        raise ConfigurationError(
            f"W has shape {W.shape} but {len(patient_ids)} patient ids were given"
        )
    # np.argmax returns the first maximal index
    cluster_ids = np.argmax(W, axis=1)
    return assign_from_predictions(patient_ids, cluster_ids)


def assign_from_predictions(patient_ids: Sequence[str],
                            cluster_ids: Sequence[int]) -> List[ClusterAssignment]:
    """Pair externally predicted cluster ids (KMeans/GMM .predict) with patient ids."""
    cluster_ids = np.asarray(cluster_ids)
    if cluster_ids.shape != (len(patient_ids),):
        raise ConfigurationError(
            f"{cluster_ids.size} predictions for {len(patient_ids)} patient ids"
        )
    if cluster_ids.size and cluster_ids.min() < 0:
        raise ConfigurationError("Cluster ids must be non-negative")
    return [ClusterAssignment(str(pid), int(cid)) for pid, cid in zip(patient_ids, cluster_ids)]


def cluster_kmeans(matrix: FeatureMatrix, n_clusters: int = 15, max_iter: int = 20,
                   random_state: int = 8803, n_init: int = 1) -> List[ClusterAssignment]:
    """KMeans hard assignments."""
    model = KMeans(n_clusters=n_clusters, max_iter=max_iter,
                   random_state=random_state, n_init=n_init)
    labels = model.fit(matrix.values).predict(matrix.values)
    logger.info("KMeans: %d clusters, %d iterations", n_clusters, model.n_iter_)
    return assign_from_predictions(matrix.patient_ids, labels)


def cluster_gmm(matrix: FeatureMatrix, n_components: int = 15, max_iter: int = 20,
                random_state: int = 8803,
                covariance_type: str = "full") -> List[ClusterAssignment]:
    """Gaussian mixture hard assignments (most probable component)."""
    model = GaussianMixture(n_components=n_components, max_iter=max_iter,
                            random_state=random_state, covariance_type=covariance_type)
    labels = model.fit(matrix.values).predict(matrix.values)
    logger.info("GMM: %d components, converged=%s", n_components, model.converged_)
    return assign_from_predictions(matrix.patient_ids, labels)


def cluster_nmf(matrix: FeatureMatrix, rank: int = 5, max_iter: int = 100,
                random_state: int = 8803, **kwargs) -> List[ClusterAssignment]:
    """NMF soft memberships turned into hard assignments.

    The matrix must already be non-negative (see make_nonnegative).
    """
    factors = NMF(rank=rank, max_iter=max_iter, random_state=random_state, **kwargs).run(matrix)
    return assign_from_nmf(factors.W, matrix.patient_ids)


STRATEGIES: Dict[str, Callable[..., List[ClusterAssignment]]] = {
    "kmeans": cluster_kmeans,
    "gmm": cluster_gmm,
    "nmf": cluster_nmf,
}


def get_strategy(name: str) -> Callable[..., List[ClusterAssignment]]:
    """Look up a clustering strategy by name ('kmeans', 'gmm', 'nmf')."""
    key = name.lower().replace('-', '_')
    if key not in STRATEGIES:
        raise ValueError(f"Unknown clustering strategy: {name}. Available: {sorted(STRATEGIES)}")
    return STRATEGIES[key]
