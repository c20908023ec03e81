# stochastic_paths/utils.py
"""
Shared guards and helpers.

Validation helpers raise InvalidParameter so that every constructor fails before
any derived state (spectrum, overlay) is built. Seeding helpers derive
independent child streams from one SeedSequence so concurrent workers never
share a generator.
"""

from __future__ import annotations
import logging
import math
from typing import List, Optional

import numpy as np
from numpy.random import SeedSequence

from .errors import InvalidParameter


# ------------------------ guards ------------------------

def _as_float(x, name: str) -> float:
    try:
        x = float(x)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a real number, got {x!r}") from None
    if not math.isfinite(x):
        raise InvalidParameter(f"{name} must be finite, got {x}")
    return x


def check_hurst(hurst) -> float:
    h = _as_float(hurst, "hurst")
    if not (0.0 < h < 1.0):
        raise InvalidParameter(f"hurst must be in (0, 1), got {h}")
    return h


def check_positive(x, name: str) -> float:
    x = _as_float(x, name)
    if x <= 0.0:
        raise InvalidParameter(f"{name} must be positive, got {x}")
    return x


def check_real(x, name: str) -> float:
    return _as_float(x, name)


def check_count(n, name: str, minimum: int = 1) -> int:
    try:
        as_int = int(n)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameter(f"{name} must be an integer, got {n!r}") from None
    if isinstance(n, bool) or as_int != n:
        raise InvalidParameter(f"{name} must be an integer, got {n!r}")
    n = as_int
    if n < minimum:
        raise InvalidParameter(f"{name} must be >= {minimum}, got {n}")
    return n


def check_horizon(t) -> float:
    """None means the unit horizon."""
    if t is None:
        return 1.0
    return check_positive(t, "t")


def check_width(m) -> Optional[int]:
    if m is None:
        return None
    return check_count(m, "m")


def next_power_of_two(n: int) -> int:
    n = int(n)
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


# ------------------------ seeding and batching ------------------------

def split_batches(n, batch_size) -> List[int]:
    """Sizes of consecutive batches covering n items."""
    n = int(n); batch_size = int(max(1, batch_size))
    sizes = []
    done = 0
    while done < n:
        take = min(batch_size, n - done)
        sizes.append(take)
        done += take
    return sizes


def child_seeds(base_seed, n_children) -> List[SeedSequence]:
    """
    Spawn n_children independent SeedSequences.

    base_seed may be None (fresh OS entropy), an int, or a SeedSequence.
    """
    if isinstance(base_seed, SeedSequence):
        ss = base_seed
    else:
        ss = SeedSequence(base_seed)
    return ss.spawn(int(n_children))


def as_generator(rng=None) -> np.random.Generator:
    """Accept None, a seed, a SeedSequence or a Generator."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


# ------------------------ logging ------------------------

def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Opt-in console logging for scripts and notebooks.

    The library itself only creates module loggers and never installs handlers.
    """
    logging.basicConfig(
        level=getattr(logging, str(level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("stochastic_paths")


__all__ = [
    "check_hurst",
    "check_positive",
    "check_real",
    "check_count",
    "check_horizon",
    "check_width",
    "next_power_of_two",
    "split_batches",
    "child_seeds",
    "as_generator",
    "setup_logging",
]
