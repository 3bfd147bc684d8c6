"""PCA dimensionality reduction shared by every clustering strategy."""
from __future__ import annotations

import logging

import numpy as np
from sklearn.decomposition import PCA

from ...core.errors import ConfigurationError
from ...core.types import FeatureMatrix, ProjectionBasis

logger = logging.getLogger(__name__)


def fit_projection(
    matrix: FeatureMatrix | np.ndarray,
    n_components: int = 10,
    random_state: int = 8803,
) -> ProjectionBasis:
    """Fit the top-k principal directions of a (standardized) matrix.

    Args:
        matrix: FeatureMatrix or (N, D) array
        n_components: k, number of directions to keep
        random_state: seed forwarded to PCA

    Returns:
        ProjectionBasis with (D, k) components

    Raises:
        ConfigurationError: if k < 1 or k > min(N, D)
    """
    values = matrix.values if isinstance(matrix, FeatureMatrix) else np.asarray(matrix, dtype=np.float64)
    if values.ndim != 2:
        raise ConfigurationError(f"Expected 2D features (N, D), got shape {values.shape}")
    n, d = values.shape
    if n_components < 1 or n_components > min(n, d):
        raise ConfigurationError(
            f"n_components must be in [1, min(N, D)={min(n, d)}], got {n_components}"
        )

    pca = PCA(n_components=n_components, svd_solver="full", random_state=random_state)
    pca.fit(values)
    logger.info(
        "PCA: %d -> %d dims, explained variance %.4f",
        d, n_components, float(np.sum(pca.explained_variance_ratio_)),
    )
    return ProjectionBasis(
        components=pca.components_.T.copy(),
        mean=pca.mean_.copy(),
        explained_variance_ratio=pca.explained_variance_ratio_.copy(),
    )


def project(basis: ProjectionBasis, features: np.ndarray) -> np.ndarray:
    """Map a (D,) vector or (N, D) matrix onto the basis -> (k,) or (N, k)."""
    x = np.asarray(features, dtype=np.float64)
    if x.shape[-1] != basis.input_dim:
        raise ConfigurationError(
            f"Expected feature dimension {basis.input_dim}, got {x.shape[-1]}"
        )
    return (x - basis.mean) @ basis.components


class Reducer:
    """Object wrapper around fit_projection / project."""

    name = "pca_reducer"

    def __init__(self, n_components: int = 10, random_state: int = 8803):
        self.n_components = n_components
        self.random_state = random_state
        self.basis: ProjectionBasis | None = None

    def fit(self, matrix) -> ProjectionBasis:
        self.basis = fit_projection(matrix, self.n_components, self.random_state)
        return self.basis

    def transform(self, features):
        if self.basis is None:
            raise RuntimeError("Call .fit() first")
        if isinstance(features, FeatureMatrix):
            return features.with_values(project(self.basis, features.values))
        return project(self.basis, features)

    def fit_transform(self, matrix):
        self.fit(matrix)
        return self.transform(matrix)
