# stochastic_paths/jumps.py
"""
Compound Poisson jump overlay and the jump-diffusion models built on it.

A CompoundPoisson instance is configured with an intensity lam, an interval
length t_max and a magnitude distribution. Each draw returns the arrival offsets
inside [0, t_max) and one i.i.d. magnitude per arrival. Recurrences consume only
the per-step total; arrival times finer than the step are not resolved.

Magnitude distributions only need the capability

    sample(size, rng) -> np.ndarray of shape (size,)

Provided: NormalJumps, ExponentialJumps and ScipyJumps (any frozen
scipy.stats distribution). make_jump_distribution builds one from a name.

Design
- Poisson counts and magnitudes are drawn in one vectorized pass per path
  (step_sums), equivalent to n successive single-interval draws
- No state is kept between draws
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np
import scipy.stats

from .diffusions import FOU
from .errors import InvalidParameter, MissingConfiguration
from .utils import as_generator, check_count, check_positive, check_real


# -------------------------
# Magnitude distributions
# -------------------------

class NormalJumps:
    """Gaussian magnitudes N(mu, sigma^2)."""

    def __init__(self, mu=0.0, sigma=1.0):
        self.mu = check_real(mu, "mu")
        self.sigma = check_positive(sigma, "sigma")

    def sample(self, size, rng):
        return rng.normal(self.mu, self.sigma, size=int(size))

    def __repr__(self):
        return f"NormalJumps(mu={self.mu}, sigma={self.sigma})"


class ExponentialJumps:
    """Exponential magnitudes with mean `scale` (upward jumps only)."""

    def __init__(self, scale=1.0):
        self.scale = check_positive(scale, "scale")

    def sample(self, size, rng):
        return rng.exponential(self.scale, size=int(size))

    def __repr__(self):
        return f"ExponentialJumps(scale={self.scale})"


class ScipyJumps:
    """Wrap a frozen scipy.stats distribution, e.g. ScipyJumps(scipy.stats.laplace(0, 0.1))."""

    def __init__(self, frozen):
        if not callable(getattr(frozen, "rvs", None)):
            raise InvalidParameter("ScipyJumps expects a frozen scipy.stats distribution")
        # scipy reports a nan support when the shape/scale arguments are out of domain
        if np.any(np.isnan(np.asarray(frozen.support(), dtype=float))):
            raise InvalidParameter(f"invalid parameters for {frozen.dist.name}: {frozen.args} {frozen.kwds}")
        self.frozen = frozen

    def sample(self, size, rng):
        return np.asarray(self.frozen.rvs(size=int(size), random_state=rng), dtype=float).reshape(-1)

    def __repr__(self):
        return f"ScipyJumps({self.frozen.dist.name})"


def make_jump_distribution(kind="normal", **params):
    """
    Build a magnitude distribution by name.

    "normal" and "exponential" map to the numpy-backed classes above. Any other
    name is looked up in scipy.stats and frozen with **params, e.g.
    make_jump_distribution("laplace", loc=0.0, scale=0.1).
    """
    name = str(kind).lower()
    if name == "normal":
        return NormalJumps(**params)
    if name == "exponential":
        return ExponentialJumps(**params)
    dist = getattr(scipy.stats, name, None)
    if not isinstance(dist, (scipy.stats.rv_continuous, scipy.stats.rv_discrete)):
        raise InvalidParameter(f"unknown jump distribution {kind!r}")
    try:
        frozen = dist(**params)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"bad parameters for {kind!r}: {exc}") from exc
    return ScipyJumps(frozen)


# -------------------------
# Compound Poisson overlay
# -------------------------

@dataclass(frozen=True)
class JumpRealization:
    times: np.ndarray   # arrival offsets within the interval, sorted
    jumps: np.ndarray   # one magnitude per arrival

    @property
    def count(self) -> int:
        return int(self.jumps.size)

    @property
    def total(self) -> float:
        return float(self.jumps.sum())


class CompoundPoisson:
    """
    Compound Poisson process on one interval of length t_max.

    Parameters
    ----------
    lam : float
        Arrival intensity (> 0).
    t_max : float
        Interval length (> 0). Jump-diffusions use the step size dt.
    distribution : object with sample(size, rng)
        Magnitude distribution. Defaults to NormalJumps(0, 1).
    """

    def __init__(self, lam, t_max=1.0, distribution=None):
        self.lam = check_positive(lam, "lam")
        self.t_max = check_positive(t_max, "t_max")
        if distribution is None:
            distribution = NormalJumps()
        if not callable(getattr(distribution, "sample", None)):
            raise InvalidParameter("distribution must provide sample(size, rng)")
        self.distribution = distribution

    def sample(self, rng=None) -> JumpRealization:
        rng = as_generator(rng)
        count = int(rng.poisson(self.lam * self.t_max))
        times = np.sort(rng.uniform(0.0, self.t_max, size=count))
        jumps = np.asarray(self.distribution.sample(count, rng), dtype=float).reshape(-1)
        return JumpRealization(times=times, jumps=jumps)

    def step_sums(self, n, rng=None) -> np.ndarray:
        """Totals of n independent interval draws, shape (n,)."""
        n = check_count(n, "n")
        rng = as_generator(rng)
        counts = rng.poisson(self.lam * self.t_max, size=n)
        total = int(counts.sum())
        if total == 0:
            return np.zeros(n, dtype=float)
        mags = np.asarray(self.distribution.sample(total, rng), dtype=float).reshape(-1)
        return np.bincount(np.repeat(np.arange(n), counts), weights=mags, minlength=n)

    def __repr__(self):
        return f"CompoundPoisson(lam={self.lam}, t_max={self.t_max}, distribution={self.distribution!r})"


# -------------------------
# Jump-diffusion models
# -------------------------

class JumpFOU(FOU):
    """
    Fractional Ornstein-Uhlenbeck with compound Poisson jumps.

        X[i] = X[i-1] + theta*(mu - X[i-1])*dt + sigma*xi[i-1] + J[i]

    J[i] is the sum of the jumps arriving during step i (overlay interval dt).

    Parameters
    ----------
    lam : float
        Jump intensity per unit time. Required.
    jump_distribution : object with sample(size, rng) or None
        Defaults to NormalJumps(0, 1).
    """

    def __init__(self, hurst, mu, sigma, theta, n, lam=None, jump_distribution=None, x0=None, t=None, m=None):
        if lam is None:
            raise MissingConfiguration("JumpFOU needs a jump intensity lam")
        lam = check_positive(lam, "lam")
        super().__init__(hurst, mu, sigma, theta, n, x0=x0, t=t, m=m)
        self.lam = lam
        self.cpoisson = CompoundPoisson(lam, t_max=self.dt, distribution=jump_distribution)

    @property
    def jump_distribution(self):
        return self.cpoisson.distribution

    def _jumps(self, rng):
        return self.cpoisson.step_sums(self._n, rng)


__all__ = [
    "NormalJumps",
    "ExponentialJumps",
    "ScipyJumps",
    "make_jump_distribution",
    "JumpRealization",
    "CompoundPoisson",
    "JumpFOU",
]
