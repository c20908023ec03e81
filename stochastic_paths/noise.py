# stochastic_paths/noise.py
"""
Fractional Gaussian noise (fGn) generators.

FGN is the spectral engine every process model is built on. It embeds the fGn
autocovariance into a circulant matrix of size 2n' (n' = next power of two >= n),
diagonalizes it once with an FFT and keeps the square-rooted eigenvalues. Each
draw then costs one complex Gaussian vector and one FFT, i.e. O(n log n).

    r(k) = 0.5 * ( |k+1|^{2H} - 2|k|^{2H} + |k-1|^{2H} ),   r(0) = 1

Key objects:
    FGN(hurst, n, t, m)        -> Davies-Harte / Wood-Chan circulant engine
    fgn_autocovariance(k, H)   -> theoretical autocovariance at unit step
    circulant_sqrt_eigenvalues -> the cached spectrum (read-only)
    fgn_hosking(n, H, t, rng)  -> exact O(n^2) reference generator

Scaling: increments live on the grid dt = t / n, so Var(xi_k) = dt^{2H}.

Reference
---------
Davies, Harte, "Tests for Hurst effect," Biometrika 74 (1987).
Wood, Chan, "Simulation of stationary Gaussian processes in [0,1]^d," JCGS (1994).
Hosking, "Modeling persistence in hydrological time series," 1984.
"""

from __future__ import annotations
import logging
import math

import numpy as np

from .errors import NumericalDegeneracy
from .sampling import Sampling
from .utils import (
    as_generator,
    check_count,
    check_horizon,
    check_hurst,
    check_width,
    next_power_of_two,
)

logger = logging.getLogger(__name__)

# Relative size (vs. the largest eigenvalue) below which a negative eigenvalue
# is rounding noise and gets clipped to zero.
EIGENVALUE_TOLERANCE = 1e-8


# ------------------------ covariance and spectrum ------------------------

def fgn_autocovariance(k, hurst: float) -> np.ndarray:
    """Autocovariance of unit-step fGn at integer lag(s) k."""
    k = np.abs(np.asarray(k, dtype=float))
    two_h = 2.0 * float(hurst)
    return 0.5 * (np.power(k + 1.0, two_h) - 2.0 * np.power(k, two_h) + np.power(np.abs(k - 1.0), two_h))


def circulant_sqrt_eigenvalues(hurst: float, n_pad: int, tol: float = EIGENVALUE_TOLERANCE) -> np.ndarray:
    """
    Square roots of the scaled eigenvalues of the circulant embedding.

    Parameters
    ----------
    hurst : float
        Hurst exponent in (0, 1).
    n_pad : int
        Embedded path length (a power of two). The circulant has size 2 * n_pad.
    tol : float
        Relative tolerance for negative eigenvalues.

    Returns
    -------
    sqrt_lam : np.ndarray, complex128, shape (2 * n_pad,)
        sqrt(max(Re lambda, 0) / (2 * n_pad)) with zero imaginary part, read-only.

    Raises
    ------
    NumericalDegeneracy
        If an eigenvalue is below -tol * max|lambda|, i.e. the embedding is not
        positive semidefinite.
    """
    n_pad = int(n_pad)
    r = fgn_autocovariance(np.arange(n_pad + 1), hurst)
    # first row: r(0..n'), then r(n'-1..1) mirrored
    row = np.concatenate([r, r[-2:0:-1]])

    lam = np.fft.fft(row).real
    lam_min = float(lam.min())
    lam_scale = max(float(np.abs(lam).max()), np.finfo(float).tiny)
    if lam_min < -tol * lam_scale:
        raise NumericalDegeneracy(
            f"circulant embedding is not PSD for H={hurst}, n'={n_pad}: min eigenvalue {lam_min:.3e}",
            min_eigenvalue=lam_min,
        )
    n_neg = int(np.count_nonzero(lam < 0.0))
    if n_neg:
        logger.debug("clipped %d negative eigenvalue(s), min %.3e", n_neg, lam_min)

    sqrt_lam = np.sqrt(np.maximum(lam, 0.0) / (2.0 * n_pad)).astype(np.complex128)
    sqrt_lam.flags.writeable = False
    return sqrt_lam


# ------------------------ spectral engine ------------------------

class FGN(Sampling):
    """
    Fractional Gaussian noise via circulant embedding.

    Parameters
    ----------
    hurst : float
        Hurst exponent in (0, 1). 0.5 gives independent Gaussian increments.
    n : int
        Number of increments per path (>= 1).
    t : float or None
        Horizon. Defaults to 1.0.
    m : int or None
        Ensemble width used by sample_par().

    Notes
    -----
    The spectrum is computed once here and never written again, so a single
    engine can serve any number of concurrent sample() calls.
    """

    def __init__(self, hurst, n, t=None, m=None):
        self.hurst = check_hurst(hurst)
        self._n = check_count(n, "n")
        self.t = check_horizon(t)
        self._m = check_width(m)

        self.dt = self.t / self._n
        self.n_pad = next_power_of_two(self._n)
        self.offset = self.n_pad - self._n
        self._scale = self.dt ** self.hurst
        self._sqrt_eigenvalues = circulant_sqrt_eigenvalues(self.hurst, self.n_pad)

        logger.debug(
            "FGN spectrum ready: H=%.4f n=%d n'=%d offset=%d",
            self.hurst, self._n, self.n_pad, self.offset,
        )

    @property
    def sqrt_eigenvalues(self) -> np.ndarray:
        return self._sqrt_eigenvalues

    def autocovariance(self, k) -> np.ndarray:
        """Theoretical autocovariance of the emitted increments at lag k (grid units)."""
        return fgn_autocovariance(k, self.hurst) * self._scale ** 2

    def sample(self, rng=None) -> np.ndarray:
        """
        One fGn realization of length n.

        Draws 2n' complex standard normals, weights them by the cached spectrum,
        applies a forward FFT and keeps the real part of n consecutive entries.
        """
        return self._sample_batch(1, as_generator(rng))[0]

    def _sample_batch(self, size: int, rng: np.random.Generator) -> np.ndarray:
        width = 2 * self.n_pad
        z = rng.standard_normal((int(size), width)) + 1j * rng.standard_normal((int(size), width))
        w = np.fft.fft(z * self._sqrt_eigenvalues[None, :], axis=1)
        start = self.offset + 1
        return w.real[:, start:start + self._n] * self._scale

    def __repr__(self):
        return f"FGN(hurst={self.hurst}, n={self._n}, t={self.t}, m={self._m})"


# ------------------------ exact reference (Hosking) ------------------------

def fgn_hosking(n, hurst, t=None, rng=None) -> np.ndarray:
    """
    Exact fGn of length n via the Hosking (Durbin-Levinson) recursion.

    Complexity is O(n^2). Same scaling as FGN: Var(X_k) = (t / n)^{2H}.

    Parameters
    ----------
    n : int
        Number of increments.
    hurst : float
        Hurst exponent in (0, 1).
    t : float or None
        Horizon, default 1.0.
    rng : None, seed or np.random.Generator

    Returns
    -------
    fgn : np.ndarray, shape (n,)
    """
    n = check_count(n, "n")
    hurst = check_hurst(hurst)
    t = check_horizon(t)
    rng = as_generator(rng)

    gamma = fgn_autocovariance(np.arange(n + 1), hurst)
    z = rng.standard_normal(n)

    x = np.empty(n, dtype=float)
    phi = np.zeros(n, dtype=float)
    var = float(gamma[0])
    x[0] = math.sqrt(var) * z[0]

    for k in range(1, n):
        kappa = (gamma[k] - np.dot(phi[:k - 1], gamma[k - 1:0:-1])) / var
        if k > 1:
            phi[:k - 1] = phi[:k - 1] - kappa * phi[k - 2::-1]
        phi[k - 1] = kappa
        var = max(var * (1.0 - kappa * kappa), 1e-20)
        mean = np.dot(phi[:k], x[k - 1::-1])
        x[k] = mean + math.sqrt(var) * z[k]

    return x * (t / n) ** hurst


__all__ = [
    "FGN",
    "fgn_autocovariance",
    "circulant_sqrt_eigenvalues",
    "fgn_hosking",
    "EIGENVALUE_TOLERANCE",
]
