# stochastic_paths/diffusions.py
"""
Fractional diffusions built on the spectral noise engine.

Every model composes one private FGN engine with an Euler-type recurrence

    X[i] = X[i-1] + drift(X[i-1]) * dt + diffusion(X[i-1]) * xi[i-1]  (+ J[i])

for i = 1..n. The recurrence produces n + 1 values; models return the first n
so that len(sample()) == n().

Models:
    EulerProcess  -> generic drift / diffusion composition (pure Python loop)
    FOU           -> fractional Ornstein-Uhlenbeck, drift theta*(mu - x), diffusion sigma
    FJacobi       -> fractional Jacobi on [0, 1], drift alpha - beta*x,
                     diffusion sigma*sqrt(x(1 - x)), absorbing at 0 and 1

FOU and FJacobi run their recurrences in numba kernels compiled with
nogil=True, so ensemble threads execute them in parallel.
"""

from __future__ import annotations
import math

import numpy as np
from numba import njit

from .errors import InvalidParameter
from .noise import FGN
from .sampling import Sampling
from .utils import as_generator, check_positive, check_real


# ------------------------ numba kernels ------------------------

@njit(nogil=True)
def _fou_kernel(x0, theta, mu, sigma, dt, noise, jumps, out):
    out[0] = x0
    for i in range(1, out.shape[0]):
        prev = out[i - 1]
        out[i] = prev + theta * (mu - prev) * dt + sigma * noise[i - 1] + jumps[i - 1]


@njit(nogil=True)
def _fjacobi_kernel(x0, alpha, beta, sigma, dt, noise, out):
    out[0] = x0
    for i in range(1, out.shape[0]):
        prev = out[i - 1]
        if prev <= 0.0:
            out[i] = 0.0
        elif prev >= 1.0:
            out[i] = 1.0
        else:
            nxt = prev + (alpha - beta * prev) * dt + sigma * math.sqrt(prev * (1.0 - prev)) * noise[i - 1]
            # overshoot lands exactly on the boundary, which then absorbs
            if nxt < 0.0:
                nxt = 0.0
            elif nxt > 1.0:
                nxt = 1.0
            out[i] = nxt


# ------------------------ generic Euler composition ------------------------

class EulerProcess(Sampling):
    """
    Base class for fGn-driven SDEs discretized with an Euler scheme.

    Subclasses validate their coefficients, call super().__init__ and define
    drift(x) and diffusion(x). Overriding _recurrence with a compiled kernel is
    optional; _jumps may return one additive jump term per step.

    Parameters
    ----------
    hurst : float
        Hurst exponent of the driving noise, in (0, 1).
    n : int
        Path length.
    x0 : float
        Initial value, always the first element of every path.
    t : float or None
        Horizon, default 1.0.
    m : int or None
        Ensemble width for sample_par().
    """

    def __init__(self, hurst, n, x0, t=None, m=None):
        self.x0 = check_real(x0, "x0")
        self.fgn = FGN(hurst, n, t=t, m=m)
        self.hurst = self.fgn.hurst
        self.t = self.fgn.t
        self.dt = self.fgn.dt
        self._n = self.fgn.n()
        self._m = self.fgn.m()

    def drift(self, x: float) -> float:
        return 0.0

    def diffusion(self, x: float) -> float:
        return 1.0

    def _jumps(self, rng):
        return None

    def _recurrence(self, noise: np.ndarray, jumps) -> np.ndarray:
        x = np.empty(self._n + 1, dtype=float)
        x[0] = self.x0
        dt = self.dt
        for i in range(1, self._n + 1):
            prev = x[i - 1]
            x[i] = prev + self.drift(prev) * dt + self.diffusion(prev) * noise[i - 1]
            if jumps is not None:
                x[i] += jumps[i - 1]
        return x

    def sample(self, rng=None) -> np.ndarray:
        rng = as_generator(rng)
        noise = self.fgn.sample(rng)
        return self._recurrence(noise, self._jumps(rng))[: self._n]

    def _sample_batch(self, size: int, rng: np.random.Generator) -> np.ndarray:
        noise = self.fgn._sample_batch(size, rng)
        out = np.empty((int(size), self._n), dtype=float)
        for i in range(out.shape[0]):
            out[i] = self._recurrence(noise[i], self._jumps(rng))[: self._n]
        return out


# ------------------------ models ------------------------

class FOU(EulerProcess):
    """
    Fractional Ornstein-Uhlenbeck process.

        dX_t = theta * (mu - X_t) dt + sigma dB^H_t

    theta = 0 reduces to scaled fractional Brownian motion started at x0.
    """

    def __init__(self, hurst, mu, sigma, theta, n, x0=None, t=None, m=None):
        self.mu = check_real(mu, "mu")
        self.sigma = check_positive(sigma, "sigma")
        self.theta = check_real(theta, "theta")
        super().__init__(hurst, n, 0.0 if x0 is None else x0, t=t, m=m)

    def drift(self, x):
        return self.theta * (self.mu - x)

    def diffusion(self, x):
        return self.sigma

    def _recurrence(self, noise, jumps):
        out = np.empty(self._n + 1, dtype=float)
        if jumps is None:
            jumps = np.zeros(self._n, dtype=float)
        _fou_kernel(self.x0, self.theta, self.mu, self.sigma, self.dt,
                    np.ascontiguousarray(noise, dtype=float),
                    np.ascontiguousarray(jumps, dtype=float), out)
        return out


class FJacobi(EulerProcess):
    """
    Fractional Jacobi process on the unit interval.

        dX_t = (alpha - beta * X_t) dt + sigma * sqrt(X_t (1 - X_t)) dB^H_t

    Boundary policy is a hard clamp: once a step reaches 0 (or 1) the path
    stays there. No reflection.

    Requires 0 < alpha < beta, sigma > 0 and x0 in [0, 1] (default 0.5).
    """

    def __init__(self, hurst, alpha, beta, sigma, n, x0=None, t=None, m=None):
        alpha = check_positive(alpha, "alpha")
        beta = check_positive(beta, "beta")
        if alpha >= beta:
            raise InvalidParameter(f"alpha must be less than beta, got alpha={alpha}, beta={beta}")
        self.alpha = alpha
        self.beta = beta
        self.sigma = check_positive(sigma, "sigma")
        x0 = 0.5 if x0 is None else check_real(x0, "x0")
        if not (0.0 <= x0 <= 1.0):
            raise InvalidParameter(f"x0 must be in [0, 1], got {x0}")
        super().__init__(hurst, n, x0, t=t, m=m)

    def drift(self, x):
        return self.alpha - self.beta * x

    def diffusion(self, x):
        return self.sigma * math.sqrt(max(x * (1.0 - x), 0.0))

    def _recurrence(self, noise, jumps):
        out = np.empty(self._n + 1, dtype=float)
        _fjacobi_kernel(self.x0, self.alpha, self.beta, self.sigma, self.dt,
                        np.ascontiguousarray(noise, dtype=float), out)
        return out


__all__ = ["EulerProcess", "FOU", "FJacobi"]
