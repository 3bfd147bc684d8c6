"""Phenotype discovery models: unsupervised clustering of patient features."""
from .nmf import NMF, run_nmf, make_nonnegative, reconstruction_error
from .clustering import (
    assign_from_nmf, assign_from_predictions,
    cluster_kmeans, cluster_gmm, cluster_nmf,
    get_strategy, STRATEGIES,
)
