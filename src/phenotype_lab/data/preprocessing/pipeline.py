"""Feature pipeline: standardize, then project onto the top principal directions.

Usage:
    pipe = FeaturePipeline(n_components=10)
    reduced = pipe.fit_transform(matrix)        # FeatureMatrix (N, 10)
    v = pipe.transform_vector(raw_vector)       # (10,) out-of-sample
"""
from __future__ import annotations

import logging

import numpy as np

from ...core.types import FeatureMatrix
from .reduction import Reducer
from .scaling import Standardizer

logger = logging.getLogger(__name__)


class FeaturePipeline:
    """Fit scaling and PCA once on the full population, then apply uniformly.

    The standardized matrix is kept because NMF runs on it rather than on
    the PCA output.

    Args:
        n_components: PCA output dimension
        strict: fail on zero-variance dimensions instead of zeroing them
        random_state: seed forwarded to PCA
    """

    name = "feature_pipeline"

    def __init__(self, n_components: int = 10, strict: bool = False, random_state: int = 8803):
        self.standardizer = Standardizer(strict=strict)
        self.reducer = Reducer(n_components=n_components, random_state=random_state)
        self.scaled: FeatureMatrix | None = None

    @property
    def dim(self) -> int:
        return self.reducer.n_components

    def fit(self, matrix: FeatureMatrix) -> "FeaturePipeline":
        self.scaled = self.standardizer.fit_transform(matrix)
        logger.info("Standardized features: %s", self.scaled.shape)
        self.reducer.fit(self.scaled)
        return self

    def transform(self, matrix: FeatureMatrix) -> FeatureMatrix:
        """Reduce every row of a FeatureMatrix; patient ids are preserved."""
        reduced = self.reducer.transform(self.standardizer.transform(matrix))
        logger.info("Reduced features: %s", reduced.shape)
        return reduced

    def transform_vector(self, vector: np.ndarray) -> np.ndarray:
        """Scale and project a single raw (D,) vector."""
        return self.reducer.transform(self.standardizer.transform(np.asarray(vector)))

    def fit_transform(self, matrix: FeatureMatrix) -> FeatureMatrix:
        self.fit(matrix)
        return self.reducer.transform(self.scaled)

    def __repr__(self) -> str:
        return f"FeaturePipeline({self.standardizer.name} → {self.reducer.name}[k={self.dim}])"
