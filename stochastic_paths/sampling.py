# stochastic_paths/sampling.py
"""
The sampling contract shared by every noise engine and process model.

    n()           configured path length
    m()           configured ensemble width or None
    sample(rng)   one path of length n()
    sample_par()  (m, n) ensemble of independent paths, built concurrently

Subclasses implement `sample`; `sample_par` is provided here and delegates to
the ensemble executor. `_sample_batch` is the unit of work a single worker runs;
engines that can vectorize across paths override it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .ensemble import run_ensemble
from .errors import MissingConfiguration
from .utils import check_width


class Sampling(ABC):

    _n: int
    _m: Optional[int]

    def n(self) -> int:
        return self._n

    def m(self) -> Optional[int]:
        return self._m

    @abstractmethod
    def sample(self, rng=None) -> np.ndarray:
        """Draw one path of length n(). `rng` may be None, a seed or a Generator."""

    def _sample_batch(self, size: int, rng: np.random.Generator) -> np.ndarray:
        out = np.empty((int(size), self.n()), dtype=float)
        for i in range(out.shape[0]):
            out[i] = self.sample(rng)
        return out

    def sample_par(self, m=None, seed=None, n_workers=None, backend="thread", batch_size=None) -> np.ndarray:
        """
        Generate an ensemble of independent paths on a worker pool.

        Parameters
        ----------
        m : int or None
            Ensemble width. Falls back to the width configured at construction.
        seed : int, SeedSequence or None
            Root of the per-batch seed tree. None draws fresh OS entropy.
        n_workers : int or None
            Pool size. Defaults to os.cpu_count().
        backend : {"thread", "process"}
            Executor type.
        batch_size : int or None
            Paths per task. Defaults to an even split over the workers.

        Returns
        -------
        paths : np.ndarray, shape (m, n)

        Raises
        ------
        MissingConfiguration
            Neither `m` nor the model's configured width is set.
        EnsembleFailure
            Any worker failed; no partial ensemble is returned.
        """
        width = check_width(m) if m is not None else self.m()
        if width is None:
            raise MissingConfiguration(
                f"{type(self).__name__} has no ensemble width; pass m or construct with m=..."
            )
        return run_ensemble(
            self, width, seed=seed, n_workers=n_workers, backend=backend, batch_size=batch_size
        )

    def __repr__(self):
        return f"{type(self).__name__}(n={self.n()}, m={self.m()})"


__all__ = ["Sampling"]
