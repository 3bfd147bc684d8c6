"""Data loading and feature preprocessing."""
from .loaders import load_features, load_labels
from .preprocessing import FeaturePipeline, Reducer, Standardizer
