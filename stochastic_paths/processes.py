# stochastic_paths/processes.py
"""
Plain correlated-noise paths.

FBM is the Euler composition with zero drift and unit diffusion, i.e. the
running sum of fractional Gaussian noise started at 0.
"""

from __future__ import annotations

import numpy as np

from .diffusions import EulerProcess


class FBM(EulerProcess):
    """
    Fractional Brownian motion B^H on [0, t].

    Var(B^H(k dt)) = (k dt)^{2H}. hurst = 0.5 gives standard Brownian motion.
    """

    def __init__(self, hurst, n, t=None, m=None):
        super().__init__(hurst, n, 0.0, t=t, m=m)

    def _recurrence(self, noise, jumps):
        out = np.empty(self._n + 1, dtype=float)
        out[0] = self.x0
        np.cumsum(noise, out=out[1:])
        return out


__all__ = ["FBM"]
