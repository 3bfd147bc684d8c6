"""Evaluation metrics, evaluator and the purity benchmark."""
from .evaluator import (
    Evaluator, ClusterMetrics,
    purity, majority_classes, join_assignments, compute_cluster_metrics,
)
from .benchmark import (
    BenchmarkConfig, PurityReport, evaluate_strategies, run_feature_sets,
)
