"""Loaders for features and labels handed over by upstream collaborators."""
from .npz import load_features, load_labels, save_features, save_labels

__all__ = [
    "load_features",
    "load_labels",
    "save_features",
    "save_labels",
]
