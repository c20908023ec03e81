# tests/test_utils.py
import logging

import numpy as np
import pytest
from numpy.random import SeedSequence

from stochastic_paths.errors import InvalidParameter
from stochastic_paths.noise import FGN
from stochastic_paths.utils import (
    as_generator,
    check_count,
    check_horizon,
    check_hurst,
    check_positive,
    child_seeds,
    next_power_of_two,
    setup_logging,
    split_batches,
)


@pytest.mark.parametrize("n, expected", [(1, 1), (2, 2), (3, 4), (4, 4), (5, 8), (1000, 1024), (1024, 1024)])
def test_next_power_of_two(n, expected):
    assert next_power_of_two(n) == expected


def test_split_batches_covers_everything():
    assert split_batches(10, 3) == [3, 3, 3, 1]
    assert split_batches(4, 10) == [4]
    assert sum(split_batches(1001, 64)) == 1001


def test_child_seeds_are_independent_and_reproducible():
    a = child_seeds(7, 3)
    b = child_seeds(SeedSequence(7), 3)
    assert len(a) == 3
    assert [s.generate_state(2).tolist() for s in a] == [s.generate_state(2).tolist() for s in b]
    assert a[0].generate_state(1)[0] != a[1].generate_state(1)[0]


def test_as_generator_passthrough():
    g = np.random.default_rng(1)
    assert as_generator(g) is g
    assert isinstance(as_generator(None), np.random.Generator)
    assert as_generator(5).standard_normal() == np.random.default_rng(5).standard_normal()


@pytest.mark.parametrize("fn, bad", [
    (check_hurst, 0.0),
    (check_hurst, "abc"),
    (lambda x: check_positive(x, "sigma"), -1.0),
    (lambda x: check_positive(x, "sigma"), float("inf")),
    (lambda x: check_count(x, "n"), True),
    (lambda x: check_count(x, "n"), "ten"),
    (check_horizon, -2.0),
])
def test_guards_raise_invalid_parameter(fn, bad):
    with pytest.raises(InvalidParameter):
        fn(bad)


def test_horizon_defaults_to_one():
    assert check_horizon(None) == 1.0


def test_ensemble_logs_summary(caplog):
    with caplog.at_level(logging.INFO, logger="stochastic_paths"):
        FGN(0.6, 8).sample_par(m=4, seed=0, n_workers=2)
    assert any("ensemble FGN: m=4 n=8" in rec.getMessage() for rec in caplog.records)


def test_setup_logging_returns_package_logger():
    logger = setup_logging("debug")
    assert logger.name == "stochastic_paths"
