"""Row-partitioned non-negative matrix factorization (multiplicative updates).

Minimizes ||V - WH||² (Lee & Seung, 2001) with V split into row blocks.
Every round has two barriers:

    1. reduce over blocks:  WᵀV = Σ W_pᵀV_p,  WᵀW = Σ W_pᵀW_p
       H <- H ⊙ WᵀV / (WᵀW H + eps)
    2. broadcast H (read-only), per block:
       W_p <- W_p ⊙ V_p Hᵀ / (W_p H Hᵀ + eps)

Each round builds new arrays; nothing is mutated in place across blocks.

Usage:
    factors = NMF(rank=5, max_iter=100).run(matrix)
    W, H = factors
    labels = W.argmax(axis=1)
"""
from __future__ import annotations

import logging
from functools import reduce
from typing import Optional, Tuple

import numpy as np
from joblib import Parallel, delayed

from ...core.errors import ConfigurationError, NumericInstabilityError
from ...core.types import FactorMatrices, FeatureMatrix, partition_rows

logger = logging.getLogger(__name__)


def _as_array(matrix: FeatureMatrix | np.ndarray) -> np.ndarray:
    if isinstance(matrix, FeatureMatrix):
        return matrix.values
    return np.asarray(matrix, dtype=np.float64)


def make_nonnegative(matrix: FeatureMatrix | np.ndarray):
    """Shift every column with negative entries so its minimum becomes 0.

    Standardized or PCA-reduced features are signed; NMF callers use this
    to meet the engine's precondition. Returns the same type it was given.
    """
    values = _as_array(matrix)
    shifted = values - np.minimum(values.min(axis=0), 0.0)
    if isinstance(matrix, FeatureMatrix):
        return matrix.with_values(shifted)
    return shifted


# ── Per-block kernels ──


def _gram_partial(W_p: np.ndarray, V_p: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    return W_p.T @ V_p, W_p.T @ W_p


def _combine(a: Tuple[np.ndarray, np.ndarray], b: Tuple[np.ndarray, np.ndarray]):
    """Associative, commutative merge of two partial (WᵀV, WᵀW) sums."""
    return a[0] + b[0], a[1] + b[1]


def _update_w_block(W_p, V_p, H, HHt, eps):
    return W_p * (V_p @ H.T) / (W_p @ HHt + eps)


def _block_error(W_p, V_p, H) -> float:
    residual = V_p - W_p @ H
    return float(np.sum(residual * residual))


def _check_finite(name: str, *arrays: np.ndarray, iteration: int) -> None:
    for a in arrays:
        if not np.all(np.isfinite(a)):
            raise NumericInstabilityError(
                f"{name} became non-finite at iteration {iteration}; "
                "scale the input matrix before factorization"
            )


class NMF:
    """Multiplicative-update NMF over row-partitioned data.

    Args:
        rank: inner dimension r of W (N×r) and H (r×D)
        max_iter: number of update rounds (0 returns the initial factors)
        n_partitions: number of row blocks V is split into
        n_jobs: joblib workers for the per-block map steps
        eps: denominator guard
        tol: optional early stop on relative error decrease; None runs
            exactly max_iter rounds
        random_state: seed for the initialization generator
    """

    def __init__(self, rank: int = 5, max_iter: int = 100, n_partitions: int = 4,
                 n_jobs: int = 1, eps: float = 1e-9, tol: Optional[float] = None,
                 random_state: int = 8803):
        if rank < 1:
            raise ConfigurationError(f"rank must be >= 1, got {rank}")
        if max_iter < 0:
            raise ConfigurationError(f"max_iter must be >= 0, got {max_iter}")
        if n_partitions < 1:
            raise ConfigurationError(f"n_partitions must be >= 1, got {n_partitions}")
        if eps <= 0:
            raise ConfigurationError(f"eps must be > 0, got {eps}")
        self.rank = rank
        self.max_iter = max_iter
        self.n_partitions = n_partitions
        self.n_jobs = n_jobs
        self.eps = eps
        self.tol = tol
        self.random_state = random_state

    def _validate(self, V: np.ndarray) -> None:
        if V.ndim != 2 or V.shape[0] == 0 or V.shape[1] == 0:
            raise ConfigurationError(f"NMF needs a non-empty 2D matrix, got shape {V.shape}")
        if not np.all(np.isfinite(V)):
            raise ConfigurationError("NMF input contains NaN or Inf")
        negative = int(np.sum(V < 0))
        if negative:
            raise ConfigurationError(
                f"NMF input has {negative} negative entries (min={V.min():.4g}); "
                "shift or clip it first, e.g. with make_nonnegative()"
            )

    def _initialize(self, V: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Small strictly positive random factors scaled to the data mean."""
        rng = np.random.default_rng(self.random_state)
        n, d = V.shape
        mean = V.mean()
        scale = np.sqrt(mean / self.rank) if mean > 0 else 1.0
        W = scale * rng.random((n, self.rank)) + 1e-6
        H = scale * rng.random((self.rank, d)) + 1e-6
        return W, H

    def run(self, matrix: FeatureMatrix | np.ndarray) -> FactorMatrices:
        """Factorize a non-negative (N, D) matrix.

        Returns:
            FactorMatrices with W (N, r), H (r, D) and the error history

        Raises:
            ConfigurationError: negative, empty or non-finite input
            NumericInstabilityError: if an update produces NaN/Inf
        """
        V = _as_array(matrix)
        self._validate(V)

        W, H = self._initialize(V)
        if isinstance(matrix, FeatureMatrix):
            V_blocks = matrix.partition(self.n_partitions)
        else:
            V_blocks = partition_rows(V, self.n_partitions)
        W_blocks = partition_rows(W, self.n_partitions)

        with Parallel(n_jobs=self.n_jobs, prefer="threads") as parallel:
            errors = [self._error(parallel, W_blocks, V_blocks, H)]
            n_iter = 0
            for it in range(1, self.max_iter + 1):
                # Barrier 1: reduce partial sums, then update H
                partials = parallel(
                    delayed(_gram_partial)(W_p, V_p) for W_p, V_p in zip(W_blocks, V_blocks)
                )
                WtV, WtW = reduce(_combine, partials)
                H = H * WtV / (WtW @ H + self.eps)
                _check_finite("H", H, iteration=it)

                # Barrier 2: broadcast the new H, update W per block
                H.setflags(write=False)
                HHt = H @ H.T
                W_blocks = parallel(
                    delayed(_update_w_block)(W_p, V_p, H, HHt, self.eps)
                    for W_p, V_p in zip(W_blocks, V_blocks)
                )
                _check_finite("W", *W_blocks, iteration=it)

                n_iter = it
                err = self._error(parallel, W_blocks, V_blocks, H)
                logger.debug("NMF iter %d: ||V - WH||² = %.6g", it, err)
                prev = errors[-1]
                errors.append(err)
                if self.tol is not None and prev - err <= self.tol * max(prev, 1e-300):
                    logger.info("NMF converged after %d iterations", it)
                    break

        W = np.concatenate(W_blocks, axis=0)
        H = np.array(H)
        logger.info(
            "NMF rank=%d on %s: %d iterations, error %.6g -> %.6g",
            self.rank, V.shape, n_iter, errors[0], errors[-1],
        )
        return FactorMatrices(W=W, H=H, n_iter=n_iter, reconstruction_errors=errors)

    @staticmethod
    def _error(parallel, W_blocks, V_blocks, H) -> float:
        return sum(parallel(
            delayed(_block_error)(W_p, V_p, H) for W_p, V_p in zip(W_blocks, V_blocks)
        ))


def run_nmf(matrix: FeatureMatrix | np.ndarray, rank: int, max_iterations: int,
            **kwargs) -> Tuple[np.ndarray, np.ndarray]:
    """Functional entry point: returns (W, H)."""
    W, H = NMF(rank=rank, max_iter=max_iterations, **kwargs).run(matrix)
    return W, H


def reconstruction_error(V: np.ndarray, W: np.ndarray, H: np.ndarray) -> float:
    """Squared Frobenius norm ||V - WH||²."""
    residual = np.asarray(V, dtype=np.float64) - W @ H
    return float(np.sum(residual * residual))
