# stochastic_paths/config.py
"""
Configuration layer: build models from plain dicts or JSON files.

    build_process("fou", hurst=0.7, mu=0.0, sigma=0.2, theta=1.5, n=512)
    process, ens = load_process("configs/fou.json")
    paths = process.sample_par(**ens.as_kwargs())

JSON layout:

    {
      "kind": "jump_fou",
      "params": {"hurst": 0.7, "mu": 0.0, "sigma": 0.2, "theta": 1.0,
                 "n": 256, "lam": 5.0, "m": 1000,
                 "jump_distribution": {"kind": "normal", "mu": 0.0, "sigma": 0.05}},
      "ensemble": {"n_workers": 4, "backend": "thread"}
    }
"""

from __future__ import annotations
import inspect
import json
from dataclasses import asdict, dataclass, fields
from typing import Optional

from .diffusions import FJacobi, FOU
from .ensemble import BACKENDS
from .errors import InvalidParameter
from .jumps import JumpFOU, make_jump_distribution
from .noise import FGN
from .processes import FBM
from .utils import check_count


PROCESSES = {
    "fgn": FGN,
    "fbm": FBM,
    "fou": FOU,
    "fjacobi": FJacobi,
    "jump_fou": JumpFOU,
}


@dataclass
class EnsembleConfig:
    n_workers: Optional[int] = None
    batch_size: Optional[int] = None
    backend: str = "thread"
    seed: Optional[int] = None

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise InvalidParameter(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        if self.n_workers is not None:
            self.n_workers = check_count(self.n_workers, "n_workers")
        if self.batch_size is not None:
            self.batch_size = check_count(self.batch_size, "batch_size")

    def as_kwargs(self) -> dict:
        return asdict(self)


def build_process(kind, **options):
    """
    Construct a model by name.

    Unknown kinds or option names raise InvalidParameter, so typos in config
    files fail loudly instead of silently falling back to defaults.
    """
    key = str(kind).lower()
    if key not in PROCESSES:
        raise InvalidParameter(f"unknown process kind {kind!r}; expected one of {sorted(PROCESSES)}")
    cls = PROCESSES[key]

    accepted = set(inspect.signature(cls.__init__).parameters) - {"self"}
    unknown = set(options) - accepted
    if unknown:
        raise InvalidParameter(f"{key} does not accept option(s) {sorted(unknown)}")

    dist = options.get("jump_distribution")
    if isinstance(dist, dict):
        dist_opts = dict(dist)
        options["jump_distribution"] = make_jump_distribution(dist_opts.pop("kind", "normal"), **dist_opts)
    return cls(**options)


def load_process(path):
    """Read a JSON config and return (process, EnsembleConfig)."""
    with open(path, "r", encoding="utf-8") as fh:
        blob = json.load(fh)
    if not isinstance(blob, dict) or "kind" not in blob:
        raise InvalidParameter(f"{path}: config must be an object with a 'kind' key")

    ens_opts = blob.get("ensemble", {}) or {}
    allowed = {f.name for f in fields(EnsembleConfig)}
    unknown = set(ens_opts) - allowed
    if unknown:
        raise InvalidParameter(f"{path}: unknown ensemble option(s) {sorted(unknown)}")

    process = build_process(blob["kind"], **(blob.get("params", {}) or {}))
    return process, EnsembleConfig(**ens_opts)


__all__ = ["PROCESSES", "EnsembleConfig", "build_process", "load_process"]
