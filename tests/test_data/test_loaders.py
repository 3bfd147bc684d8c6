"""Tests for the NPZ feature/label exchange format."""
import numpy as np
import pytest

from phenotype_lab.core import ConfigurationError, FeatureMatrix
from phenotype_lab.data.loaders import load_features, load_labels, save_features, save_labels


class TestNPZLoaders:
    def test_features_roundtrip(self, tmp_path):
        m = FeatureMatrix(np.array(["a", "b"]), np.array([[1.0, 2.0], [3.0, 4.0]]))
        loaded = load_features(save_features(tmp_path / "features.npz", m))
        assert list(loaded.patient_ids) == ["a", "b"]
        np.testing.assert_array_equal(loaded.values, m.values)

    def test_labels_roundtrip(self, tmp_path):
        labels = {"b": 2, "a": 1, "c": 3}
        assert load_labels(save_labels(tmp_path / "labels.npz", labels)) == labels

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_features(tmp_path / "nope.npz")

    def test_missing_array(self, tmp_path):
        path = tmp_path / "bad.npz"
        np.savez(path, patient_ids=np.array(["a"]))
        with pytest.raises(ConfigurationError):
            load_features(path)
