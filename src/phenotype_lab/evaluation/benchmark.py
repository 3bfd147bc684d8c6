"""End-to-end purity benchmark of KMeans, GMM and NMF on one feature set.

    raw features -> standardize -> PCA(k) -> {KMeans, GMM}
                 -> standardize -> make_nonnegative -> NMF
    each -> join with phenotype labels on patient id -> purity
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.types import FeatureMatrix
from ..data.preprocessing import FeaturePipeline
from ..models.discovery import cluster_gmm, cluster_kmeans, cluster_nmf, make_nonnegative
from .evaluator import ClusterMetrics, Evaluator

logger = logging.getLogger(__name__)

STRATEGY_NAMES = {"kmeans": "kMeans", "gmm": "GMM", "nmf": "NMF"}


@dataclass
class BenchmarkConfig:
    """Parameters of one benchmark run (mirrors configs/config.yaml)."""
    seed: int = 8803
    n_components: int = 10
    strict_scaling: bool = False
    kmeans_clusters: int = 15
    kmeans_max_iter: int = 20
    kmeans_n_init: int = 1
    gmm_components: int = 15
    gmm_max_iter: int = 20
    gmm_covariance_type: str = "full"
    nmf_rank: int = 5
    nmf_max_iter: int = 100
    nmf_partitions: int = 4
    nmf_n_jobs: int = 1
    nmf_eps: float = 1e-9
    nmf_tol: Optional[float] = None
    nmf_input: str = "scaled"  # 'scaled' or 'reduced'
    strategies: Sequence[str] = field(default_factory=lambda: ["kmeans", "gmm", "nmf"])

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any]) -> "BenchmarkConfig":
        """Build from a flat mapping or the nested Hydra layout."""
        cfg = dict(cfg)
        flat: Dict[str, Any] = {}
        nested = {
            "pipeline": {"n_components": "n_components", "strict": "strict_scaling"},
            "kmeans": {"n_clusters": "kmeans_clusters", "max_iter": "kmeans_max_iter",
                       "n_init": "kmeans_n_init"},
            "gmm": {"n_components": "gmm_components", "max_iter": "gmm_max_iter",
                    "covariance_type": "gmm_covariance_type"},
            "nmf": {"rank": "nmf_rank", "max_iter": "nmf_max_iter",
                    "n_partitions": "nmf_partitions", "n_jobs": "nmf_n_jobs",
                    "eps": "nmf_eps", "tol": "nmf_tol", "input": "nmf_input"},
        }
        for group, mapping in nested.items():
            sub = cfg.pop(group, None)
            if isinstance(sub, Mapping):
                for key, target in mapping.items():
                    if key in sub:
                        flat[target] = sub[key]
        known = {f.name for f in fields(cls)}
        flat.update({k: v for k, v in cfg.items() if k in known})
        if "strategies" in flat:
            flat["strategies"] = list(flat["strategies"])
        return cls(**flat)


@dataclass
class PurityReport:
    """Per-strategy metrics for one feature set."""
    tag: str = ""
    metrics: Dict[str, ClusterMetrics] = field(default_factory=dict)

    @property
    def purities(self) -> Dict[str, float]:
        return {name: m.purity for name, m in self.metrics.items()}

    def format_report(self) -> str:
        return '\n'.join(
            f"[{self.tag}] purity of {STRATEGY_NAMES.get(name, name)} is: {m.purity:.5f}"
            for name, m in self.metrics.items()
        )


def evaluate_strategies(
    phenotype_labels: Mapping[str, int],
    raw_features: FeatureMatrix | Mapping[str, Sequence[float]],
    config: Optional[BenchmarkConfig] = None,
    tag: str = "All feature",
) -> PurityReport:
    """Cluster one feature set with every configured strategy and score purity.

    Args:
        phenotype_labels: {patient_id: class}
        raw_features: FeatureMatrix or {patient_id: vector}
        config: run parameters; defaults reproduce the reference pipeline
        tag: label used in the formatted report

    Returns:
        PurityReport keyed by strategy name
    """
    config = config or BenchmarkConfig()
    matrix = raw_features if isinstance(raw_features, FeatureMatrix) else FeatureMatrix.from_mapping(raw_features)
    logger.info("[%s] %d patients x %d features", tag, *matrix.shape)

    pipeline = FeaturePipeline(n_components=config.n_components,
                               strict=config.strict_scaling, random_state=config.seed)
    reduced = pipeline.fit_transform(matrix)
    evaluator = Evaluator(phenotype_labels)
    report = PurityReport(tag=tag)

    for name in config.strategies:
        if name == "kmeans":
            assignments = cluster_kmeans(
                reduced, n_clusters=config.kmeans_clusters, max_iter=config.kmeans_max_iter,
                random_state=config.seed, n_init=config.kmeans_n_init)
        elif name == "gmm":
            assignments = cluster_gmm(
                reduced, n_components=config.gmm_components, max_iter=config.gmm_max_iter,
                random_state=config.seed, covariance_type=config.gmm_covariance_type)
        elif name == "nmf":
            if config.nmf_input == "scaled":
                source = pipeline.scaled
            elif config.nmf_input == "reduced":
                source = reduced
            else:
                raise ValueError(f"Unknown nmf_input: {config.nmf_input}. Use 'scaled' or 'reduced'")
            assignments = cluster_nmf(
                make_nonnegative(source), rank=config.nmf_rank, max_iter=config.nmf_max_iter,
                random_state=config.seed, n_partitions=config.nmf_partitions,
                n_jobs=config.nmf_n_jobs, eps=config.nmf_eps, tol=config.nmf_tol)
        else:
            raise ValueError(f"Unknown strategy: {name}. Available: {sorted(STRATEGY_NAMES)}")

        report.metrics[name] = evaluator.evaluate_assignments(assignments)
        logger.info("[%s] %s purity = %.5f", tag, name, report.metrics[name].purity)

    return report


def run_feature_sets(
    phenotype_labels: Mapping[str, int],
    feature_sets: Mapping[str, FeatureMatrix | Mapping[str, Sequence[float]]],
    config: Optional[BenchmarkConfig] = None,
) -> Dict[str, PurityReport]:
    """Evaluate several feature sets (e.g. all vs. filtered features) in order."""
    return {
        tag: evaluate_strategies(phenotype_labels, features, config, tag=tag)
        for tag, features in feature_sets.items()
    }
