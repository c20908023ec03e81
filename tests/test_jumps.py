# tests/test_jumps.py
import numpy as np
import pytest
import scipy.stats

from stochastic_paths.diffusions import FOU
from stochastic_paths.errors import InvalidParameter, MissingConfiguration
from stochastic_paths.jumps import (
    CompoundPoisson,
    ExponentialJumps,
    JumpFOU,
    NormalJumps,
    ScipyJumps,
    make_jump_distribution,
)


# --------------------------
# Magnitude distributions
# --------------------------

def test_normal_and_exponential_draws():
    rng = np.random.default_rng(0)
    x = NormalJumps(0.5, 0.1).sample(20_000, rng)
    y = ExponentialJumps(2.0).sample(20_000, rng)
    assert x.shape == (20_000,) and y.shape == (20_000,)
    assert abs(float(x.mean()) - 0.5) < 0.01
    assert np.all(y >= 0.0)
    assert abs(float(y.mean()) - 2.0) < 0.1


def test_distribution_guards():
    with pytest.raises(InvalidParameter):
        NormalJumps(0.0, 0.0)
    with pytest.raises(InvalidParameter):
        ExponentialJumps(-1.0)
    with pytest.raises(InvalidParameter):
        ScipyJumps(object())


def test_scipy_distribution_by_name():
    dist = make_jump_distribution("laplace", loc=0.0, scale=0.1)
    assert isinstance(dist, ScipyJumps)
    x = dist.sample(5000, np.random.default_rng(1))
    assert x.shape == (5000,)
    # KS against the reference law
    assert scipy.stats.kstest(x, scipy.stats.laplace(0.0, 0.1).cdf).pvalue > 1e-3


@pytest.mark.parametrize("kind, cls", [("normal", NormalJumps), ("Exponential", ExponentialJumps)])
def test_builtin_distribution_by_name(kind, cls):
    assert isinstance(make_jump_distribution(kind), cls)


def test_unknown_distribution_name():
    with pytest.raises(InvalidParameter):
        make_jump_distribution("no_such_law")
    with pytest.raises(InvalidParameter):
        make_jump_distribution("norm", bogus=1.0)


@pytest.mark.parametrize("kind, params", [
    ("norm", dict(loc=0.0, scale=-1.0)),
    ("gamma", dict(a=-2.0)),
    ("poisson", dict(mu=-1.0)),
])
def test_out_of_domain_scipy_parameters_fail_at_construction(kind, params):
    with pytest.raises(InvalidParameter):
        make_jump_distribution(kind, **params)
    with pytest.raises(InvalidParameter):
        ScipyJumps(getattr(scipy.stats, kind)(**params))


def test_heavy_tailed_scipy_law_is_accepted():
    # no finite mean, still a valid jump law
    dist = make_jump_distribution("cauchy", loc=0.0, scale=0.01)
    assert dist.sample(10, np.random.default_rng(0)).shape == (10,)


# --------------------------
# Compound Poisson overlay
# --------------------------

@pytest.mark.parametrize("lam, t_max", [(0.0, 1.0), (-1.0, 1.0), (1.0, 0.0)])
def test_overlay_guards(lam, t_max):
    with pytest.raises(InvalidParameter):
        CompoundPoisson(lam, t_max)


def test_overlay_requires_sample_capability():
    with pytest.raises(InvalidParameter):
        CompoundPoisson(1.0, 1.0, distribution=scipy.stats.norm(0, 1))


def test_single_realization_structure():
    cp = CompoundPoisson(50.0, 0.5, ExponentialJumps(1.0))
    rz = cp.sample(rng=3)
    assert rz.count == rz.times.size == rz.jumps.size
    assert np.all(np.diff(rz.times) >= 0.0)
    assert np.all((rz.times >= 0.0) & (rz.times < 0.5))
    assert rz.total == pytest.approx(float(rz.jumps.sum()))


def test_arrival_count_is_poisson():
    lam, t_max = 4.0, 0.5
    cp = CompoundPoisson(lam, t_max)
    rng = np.random.default_rng(12)
    counts = np.array([cp.sample(rng).count for _ in range(5000)])
    assert abs(float(counts.mean()) - lam * t_max) < 0.1
    assert abs(float(counts.var()) - lam * t_max) < 0.2


def test_step_sums_mean_and_shape():
    lam, dt, scale, n = 20.0, 0.01, 0.5, 10_000
    cp = CompoundPoisson(lam, dt, ExponentialJumps(scale))
    sums = cp.step_sums(n, rng=5)
    assert sums.shape == (n,)
    assert np.all(sums >= 0.0)
    assert float(sums.mean()) == pytest.approx(lam * dt * scale, rel=0.15)


def test_step_sums_can_be_all_zero():
    sums = CompoundPoisson(1e-12, 1e-6).step_sums(100, rng=0)
    assert sums.shape == (100,)
    assert np.all(sums == 0.0)


# --------------------------
# Jump-diffusion mean reversion
# --------------------------

def test_jump_fou_requires_intensity():
    with pytest.raises(MissingConfiguration):
        JumpFOU(0.7, 0.0, 0.2, 1.0, 64)
    with pytest.raises(InvalidParameter):
        JumpFOU(0.7, 0.0, 0.2, 1.0, 64, lam=0.0)


def test_jump_fou_overlay_uses_step_interval():
    model = JumpFOU(0.7, 0.0, 0.2, 1.0, 64, lam=5.0, t=2.0, jump_distribution=ExponentialJumps(0.1))
    assert model.cpoisson.t_max == pytest.approx(2.0 / 64)
    assert isinstance(model.jump_distribution, ExponentialJumps)
    assert isinstance(JumpFOU(0.7, 0.0, 0.2, 1.0, 8, lam=1.0).jump_distribution, NormalJumps)


def test_jump_fou_without_arrivals_matches_fou():
    args = (0.6, 0.5, 0.3, 1.2, 128)
    jf = JumpFOU(*args, lam=1e-12, x0=1.0)
    fou = FOU(*args, x0=1.0)
    assert np.array_equal(jf.sample(17), fou.sample(17))


def test_jump_fou_drift_from_positive_jumps():
    # theta=0 and exponential jumps: E[X_end - x0] = (n-1) * lam * dt * scale
    n, lam, scale = 100, 100.0, 0.02
    model = JumpFOU(0.7, 0.0, 0.01, 0.0, n, lam=lam, jump_distribution=ExponentialJumps(scale), m=2000)
    paths = model.sample_par(seed=31)
    expected = (n - 1) * lam * (1.0 / n) * scale
    assert float(np.mean(paths[:, -1])) == pytest.approx(expected, rel=0.15)
    assert np.all(paths[:, 0] == 0.0)
