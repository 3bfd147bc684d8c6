"""Feature standardization: zero mean, unit (sample) variance per dimension."""
from __future__ import annotations

import logging

import numpy as np

from ...core.errors import ConfigurationError
from ...core.types import FeatureMatrix, ScalingParameters

logger = logging.getLogger(__name__)


def fit_scaling(matrix: FeatureMatrix | np.ndarray) -> ScalingParameters:
    """Compute per-dimension mean and sample standard deviation.

    Args:
        matrix: FeatureMatrix or (N, D) array

    Returns:
        ScalingParameters; std is 0 for zero-variance dimensions
        (every dimension when N == 1)

    Raises:
        ConfigurationError: if the matrix has no rows
    """
    values = matrix.values if isinstance(matrix, FeatureMatrix) else np.asarray(matrix, dtype=np.float64)
    if values.ndim != 2:
        raise ConfigurationError(f"Expected 2D features (N, D), got shape {values.shape}")
    n = values.shape[0]
    if n == 0:
        raise ConfigurationError("Cannot fit scaling parameters on an empty matrix")

    mean = values.mean(axis=0)
    if n > 1:
        std = values.std(axis=0, ddof=1)
        # Constant columns can leave rounding residue in std
        std[np.ptp(values, axis=0) == 0] = 0.0
    else:
        std = np.zeros_like(mean)
    return ScalingParameters(mean=mean, std=std, n_samples=n)


def apply_scaling(params: ScalingParameters, features: np.ndarray) -> np.ndarray:
    """Centre and scale a single (D,) vector or an (N, D) matrix.

    Zero-variance dimensions are only centred, so they come out as zero.
    """
    x = np.asarray(features, dtype=np.float64)
    if x.shape[-1] != params.dim:
        raise ConfigurationError(
            f"Expected feature dimension {params.dim}, got {x.shape[-1]}"
        )
    safe_std = np.where(params.zero_variance, 1.0, params.std)
    out = (x - params.mean) / safe_std
    out[..., params.zero_variance] = 0.0
    return out


class Standardizer:
    """Fit-once, apply-everywhere feature scaler.

    Usage:
        scaler = Standardizer()
        scaled = scaler.fit_transform(matrix)
        v = scaler.transform(new_vector)

    Args:
        strict: raise ConfigurationError on zero-variance dimensions
            instead of zeroing them
    """

    name = "standardizer"

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.params: ScalingParameters | None = None

    def fit(self, matrix: FeatureMatrix | np.ndarray) -> ScalingParameters:
        params = fit_scaling(matrix)
        constant = np.flatnonzero(params.zero_variance)
        if constant.size:
            if self.strict:
                raise ConfigurationError(
                    f"Zero-variance feature dimensions: {constant.tolist()}"
                )
            logger.warning(
                "%d zero-variance dimension(s) will be set to 0: %s",
                constant.size, constant.tolist()[:20],
            )
        self.params = params
        return params

    def transform(self, features):
        """Scale a FeatureMatrix, (N, D) array or (D,) vector."""
        if self.params is None:
            raise RuntimeError("Call .fit() first")
        if isinstance(features, FeatureMatrix):
            return features.with_values(apply_scaling(self.params, features.values))
        return apply_scaling(self.params, features)

    def fit_transform(self, matrix):
        self.fit(matrix)
        return self.transform(matrix)
