"""
Core data types for phenotype-lab.

Defines shared data structures used across the pipeline:
- FeatureMatrix: per-patient feature rows keyed by patient id
- ScalingParameters / ProjectionBasis: fitted, immutable preprocessing state
- FactorMatrices: output of one NMF run
- ClusterAssignment: (patient_id, cluster_id) pair
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, Mapping, NamedTuple, Sequence

import numpy as np

from .errors import ConfigurationError


class PhenotypeClass(IntEnum):
    """Ground-truth phenotype codes produced by the phenotype classifier."""
    CASE = 1
    CONTROL = 2
    UNKNOWN = 3


class ClusterAssignment(NamedTuple):
    patient_id: str
    cluster_id: int


@dataclass
class FeatureMatrix:
    """Row-indexed patient feature matrix.

    Attributes:
        patient_ids: Shape (N,) — one id per row, unique
        values: Shape (N, D) — float feature rows
    """
    patient_ids: np.ndarray  # (N,)
    values: np.ndarray  # (N, D)

    def __post_init__(self):
        self.patient_ids = np.asarray(self.patient_ids).astype(str)
        self.values = np.asarray(self.values, dtype=np.float64)
        self.validate()

    @classmethod
    def from_mapping(cls, features: Mapping[str, Sequence[float]]) -> "FeatureMatrix":
        """Build from {patient_id: vector}; rows are ordered by patient id."""
        if not features:
            raise ConfigurationError("Feature mapping is empty")
        ids = sorted(features)
        dims = {len(features[pid]) for pid in ids}
        if len(dims) != 1:
            raise ConfigurationError(
                f"Feature vectors must share one dimensionality, got {sorted(dims)}"
            )
        values = np.array([np.asarray(features[pid], dtype=np.float64) for pid in ids])
        return cls(np.array(ids), values)

    @property
    def num_rows(self) -> int:
        return self.values.shape[0]

    @property
    def num_features(self) -> int:
        return self.values.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    def validate(self) -> None:
        """Check internal consistency."""
        if self.values.ndim != 2:
            raise ConfigurationError(
                f"Expected 2D feature values (N, D), got shape {self.values.shape}"
            )
        if self.patient_ids.shape != (self.values.shape[0],):
            raise ConfigurationError(
                f"{self.patient_ids.size} patient ids for {self.values.shape[0]} rows"
            )
        if len(np.unique(self.patient_ids)) != self.patient_ids.size:
            raise ConfigurationError("Patient ids must be unique")
        if not np.all(np.isfinite(self.values)):
            raise ConfigurationError("Feature values contain NaN or Inf")

    def with_values(self, values: np.ndarray) -> "FeatureMatrix":
        """Same patients, new feature columns."""
        return FeatureMatrix(self.patient_ids.copy(), values)

    def partition(self, num_partitions: int) -> list[np.ndarray]:
        """Split rows into contiguous, order-preserving blocks."""
        return partition_rows(self.values, num_partitions)


def partition_rows(values: np.ndarray, num_partitions: int) -> list[np.ndarray]:
    """Split an (N, ...) array into at most min(num_partitions, N) row blocks.

    Block boundaries depend only on N and num_partitions, so arrays with the
    same row count (V and W) split identically.
    """
    if num_partitions < 1:
        raise ConfigurationError(f"num_partitions must be >= 1, got {num_partitions}")
    n = max(1, min(num_partitions, values.shape[0]))
    return np.array_split(values, n, axis=0)


@dataclass(frozen=True)
class ScalingParameters:
    """Per-dimension mean and sample standard deviation.

    Attributes:
        mean: Shape (D,)
        std: Shape (D,) — ddof=1; zero marks a zero-variance dimension
        n_samples: Number of rows the parameters were fit on
    """
    mean: np.ndarray
    std: np.ndarray
    n_samples: int = 0

    @property
    def dim(self) -> int:
        return self.mean.shape[0]

    @property
    def zero_variance(self) -> np.ndarray:
        return self.std == 0


@dataclass(frozen=True)
class ProjectionBasis:
    """Top-k principal directions.

    Attributes:
        components: Shape (D, k) — one principal direction per column
        mean: Shape (D,) — centre subtracted before projection
        explained_variance_ratio: Shape (k,)
    """
    components: np.ndarray
    mean: np.ndarray
    explained_variance_ratio: np.ndarray | None = None

    @property
    def input_dim(self) -> int:
        return self.components.shape[0]

    @property
    def n_components(self) -> int:
        return self.components.shape[1]


@dataclass
class FactorMatrices:
    """Result of one NMF run: V ≈ W @ H.

    Attributes:
        W: Shape (N, r) — patient-by-factor memberships
        H: Shape (r, D') — factor-by-feature loadings
        n_iter: Number of update rounds performed
        reconstruction_errors: ||V - WH||² before the first round and after each round
    """
    W: np.ndarray
    H: np.ndarray
    n_iter: int = 0
    reconstruction_errors: list[float] = field(default_factory=list)

    @property
    def rank(self) -> int:
        return self.W.shape[1]

    def __iter__(self) -> Iterator[np.ndarray]:
        yield self.W
        yield self.H
