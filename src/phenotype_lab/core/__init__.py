"""Core module — numpy-only, zero heavy dependencies.

Public API:
    FeatureMatrix, ScalingParameters, ProjectionBasis, FactorMatrices, partition_rows
    ClusterAssignment, PhenotypeClass
    PhenotypeLabError, ConfigurationError, NumericInstabilityError
"""
from .errors import ConfigurationError, NumericInstabilityError, PhenotypeLabError
from .types import (
    ClusterAssignment,
    FactorMatrices,
    FeatureMatrix,
    PhenotypeClass,
    ProjectionBasis,
    ScalingParameters,
    partition_rows,
)

__all__ = [
    "FeatureMatrix",
    "ScalingParameters",
    "ProjectionBasis",
    "FactorMatrices",
    "ClusterAssignment",
    "PhenotypeClass",
    "PhenotypeLabError",
    "ConfigurationError",
    "NumericInstabilityError",
    "partition_rows",
]
