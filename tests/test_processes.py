# tests/test_processes.py
import numpy as np
import pytest

from stochastic_paths.errors import InvalidParameter
from stochastic_paths.processes import FBM


def test_fbm_starts_at_zero_and_accumulates_noise():
    model = FBM(0.35, 50, t=2.0)
    xi = model.fgn.sample(4)
    path = model.sample(4)
    assert path.shape == (50,)
    assert path[0] == 0.0
    assert np.allclose(path[1:], np.cumsum(xi)[:49])


@pytest.mark.parametrize("hurst", [0.25, 0.5, 0.75])
def test_fbm_terminal_variance(hurst):
    n, T = 64, 1.0
    paths = FBM(hurst, n, t=T, m=5000).sample_par(seed=10)
    t_last = (n - 1) * T / n
    assert float(np.var(paths[:, -1])) == pytest.approx(t_last ** (2 * hurst), rel=0.08)


def test_fbm_rejects_bad_hurst():
    with pytest.raises(InvalidParameter):
        FBM(1.2, 16)
