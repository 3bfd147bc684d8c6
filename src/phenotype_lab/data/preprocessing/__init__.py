"""Feature preprocessing: standardization, PCA reduction and their composition."""
from .scaling import Standardizer, fit_scaling, apply_scaling
from .reduction import Reducer, fit_projection, project
from .pipeline import FeaturePipeline

__all__ = [
    "Standardizer",
    "fit_scaling",
    "apply_scaling",
    "Reducer",
    "fit_projection",
    "project",
    "FeaturePipeline",
]
