"""Tests for PCA reduction and the feature pipeline."""
import numpy as np
import pytest

from phenotype_lab.core import ConfigurationError, FeatureMatrix
from phenotype_lab.data.preprocessing import FeaturePipeline, fit_projection, project


def _low_rank(n=120, d=8, rank=3, seed=0):
    rng = np.random.default_rng(seed)
    Z = rng.normal(size=(n, rank)) * np.array([5.0, 3.0, 2.0])[:rank]
    A = rng.normal(size=(rank, d))
    return Z @ A + 0.01 * rng.normal(size=(n, d))


def _projector(components):
    return components @ components.T


class TestFitProjection:
    def test_shapes(self):
        X = _low_rank()
        basis = fit_projection(X, n_components=3)
        assert basis.components.shape == (8, 3)
        assert basis.n_components == 3
        assert basis.input_dim == 8

    def test_orthonormal_columns(self):
        basis = fit_projection(_low_rank(), n_components=3)
        np.testing.assert_allclose(basis.components.T @ basis.components, np.eye(3), atol=1e-8)

    def test_matches_svd_subspace(self):
        """Compare subspaces, not coefficients: signs are arbitrary."""
        X = _low_rank()
        basis = fit_projection(X, n_components=3)
        _, _, Vt = np.linalg.svd(X - X.mean(axis=0), full_matrices=False)
        np.testing.assert_allclose(
            _projector(basis.components), _projector(Vt[:3].T), atol=1e-6
        )

    def test_low_reconstruction_error(self):
        X = _low_rank()
        basis = fit_projection(X, n_components=3)
        Y = project(basis, X)
        recon = Y @ basis.components.T + basis.mean
        assert np.mean((X - recon) ** 2) < 1e-3

    def test_reproducible(self):
        X = _low_rank()
        a = fit_projection(X, n_components=3)
        b = fit_projection(X, n_components=3)
        np.testing.assert_allclose(_projector(a.components), _projector(b.components), atol=1e-10)

    @pytest.mark.parametrize("k", [0, 9])
    def test_invalid_k(self, k):
        with pytest.raises(ConfigurationError):
            fit_projection(_low_rank(), n_components=k)


class TestProject:
    def test_vector_and_matrix_agree(self):
        X = _low_rank()
        basis = fit_projection(X, n_components=2)
        rows = project(basis, X)
        single = project(basis, X[5])
        assert single.shape == (2,)
        np.testing.assert_allclose(single, rows[5])

    def test_dimension_mismatch(self):
        basis = fit_projection(_low_rank(), n_components=2)
        with pytest.raises(ConfigurationError):
            project(basis, np.ones(5))


class TestFeaturePipeline:
    def _matrix(self):
        X = _low_rank(n=50, d=12)
        return FeatureMatrix(np.array([f"p{i:03d}" for i in range(50)]), X)

    def test_fit_transform_keeps_ids(self):
        m = self._matrix()
        pipe = FeaturePipeline(n_components=4)
        reduced = pipe.fit_transform(m)
        assert reduced.shape == (50, 4)
        assert list(reduced.patient_ids) == list(m.patient_ids)
        assert pipe.scaled.shape == (50, 12)

    def test_transform_vector_matches_rows(self):
        m = self._matrix()
        pipe = FeaturePipeline(n_components=4)
        reduced = pipe.fit_transform(m)
        np.testing.assert_allclose(pipe.transform_vector(m.values[7]), reduced.values[7], atol=1e-10)
        np.testing.assert_allclose(pipe.transform(m).values, reduced.values, atol=1e-10)

    def test_repr(self):
        assert "k=4" in repr(FeaturePipeline(n_components=4))
