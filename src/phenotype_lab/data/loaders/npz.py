"""NPZ exchange format for precomputed patient features and phenotype labels.

Feature construction and phenotyping happen upstream; they hand over:
    features.npz: patient_ids (N,) str, features (N, D) float
    labels.npz:   patient_ids (M,) str, labels (M,) int
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

import numpy as np

from ...core.errors import ConfigurationError
from ...core.types import FeatureMatrix

logger = logging.getLogger(__name__)


def _open(path: str | Path, required: tuple[str, ...]):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No such file: {path}")
    data = np.load(path, allow_pickle=False)
    missing = [k for k in required if k not in data.files]
    if missing:
        raise ConfigurationError(f"{path} is missing arrays {missing}; found {data.files}")
    return data


def load_features(path: str | Path) -> FeatureMatrix:
    """Load a FeatureMatrix from an .npz archive."""
    data = _open(path, ("patient_ids", "features"))
    matrix = FeatureMatrix(data["patient_ids"], data["features"])
    logger.info("Loaded features %s from %s", matrix.shape, path)
    return matrix


def load_labels(path: str | Path) -> dict[str, int]:
    """Load {patient_id: phenotype class} from an .npz archive."""
    data = _open(path, ("patient_ids", "labels"))
    ids = data["patient_ids"].astype(str)
    labels = data["labels"].astype(int)
    if ids.shape != labels.shape:
        raise ConfigurationError(
            f"{ids.size} patient ids for {labels.size} labels in {path}"
        )
    logger.info("Loaded %d phenotype labels from %s", ids.size, path)
    return {pid: int(lbl) for pid, lbl in zip(ids, labels)}


def save_features(path: str | Path, matrix: FeatureMatrix) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez(path, patient_ids=matrix.patient_ids, features=matrix.values)
    return path


def save_labels(path: str | Path, labels: Mapping[str, int]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ids = sorted(labels)
    np.savez(
        path,
        patient_ids=np.array(ids, dtype=str),
        labels=np.array([labels[pid] for pid in ids], dtype=int),
    )
    return path
