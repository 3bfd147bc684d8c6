"""Purity benchmark CLI: cluster each feature set and score it against phenotype labels.

Usage:
    python scripts/evaluate.py
    python scripts/evaluate.py paths.data_dir=/data/t2dm nmf.max_iter=200
"""
import json
import logging
from pathlib import Path

import hydra
from omegaconf import DictConfig, OmegaConf

log = logging.getLogger(__name__)


@hydra.main(version_base=None, config_path="../configs", config_name="config")
def main(cfg: DictConfig) -> None:
    from phenotype_lab.data.loaders import load_features, load_labels
    from phenotype_lab.evaluation import BenchmarkConfig, run_feature_sets

    labels = load_labels(cfg.data.labels)
    log.info(f"Loaded {len(labels)} phenotype labels")

    feature_sets = {
        tag: load_features(path) for tag, path in cfg.data.feature_sets.items()
    }

    config = BenchmarkConfig.from_dict(OmegaConf.to_container(cfg, resolve=True))
    log.info(f"Benchmark config: {config}")

    reports = run_feature_sets(labels, feature_sets, config)

    for report in reports.values():
        text = report.format_report()
        log.info(f"\n{text}")
        print(text)

    output_dir = Path(cfg.paths.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    with open(output_dir / "purity.json", "w") as f:
        json.dump({tag: r.purities for tag, r in reports.items()}, f, indent=2)
    log.info(f"Results saved to {output_dir / 'purity.json'}")


if __name__ == "__main__":
    main()
