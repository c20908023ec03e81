# stochastic_paths/ensemble.py
"""
Concurrent ensemble executor.

Splits an ensemble of m paths into batches and runs each batch on a pool
worker. Every batch owns a Generator built from its own child SeedSequence, so
no random state is shared between workers and the ensemble is reproducible
whenever a root seed is given.

Failure policy: the first worker exception cancels what has not started yet and
is re-raised as EnsembleFailure. A partially filled ensemble is never returned.

Notes:
    - "thread" is the default backend. numpy's FFT and the numba recurrence
      kernels release the GIL, so threads scale without pickling the model.
    - "process" pickles the sampler once per task. Models are plain objects over
      numpy arrays, so this works; on Windows guard the call with
      'if __name__ == "__main__":'.
    - Without an explicit batch_size a task holds at most MAX_BATCH_ELEMENTS
      spectral samples (rows times 2n'), so memory per worker stays bounded
      for large m.
    - The process backend sets OMP/MKL/OpenBLAS/NumExpr thread counts to 1 in
      os.environ (unless already set) before its pool starts, so child workers
      do not oversubscribe cores. The thread backend leaves the environment
      untouched.
"""

from __future__ import annotations
import logging
import os
import time
from concurrent.futures import FIRST_EXCEPTION, ProcessPoolExecutor, ThreadPoolExecutor, wait

import numpy as np

from .errors import EnsembleFailure, InvalidParameter
from .utils import check_count, child_seeds, next_power_of_two, split_batches

logger = logging.getLogger(__name__)

BACKENDS = ("thread", "process")

# complex spectral samples per task when batch_size is not given
MAX_BATCH_ELEMENTS = 1 << 21

THREAD_ENV_VARS = ("OMP_NUM_THREADS", "MKL_NUM_THREADS", "OPENBLAS_NUM_THREADS", "NUMEXPR_NUM_THREADS")


def _batch_worker(args):
    # module-level so ProcessPoolExecutor can pickle it
    sampler, size, seed_seq = args
    rng = np.random.default_rng(seed_seq)
    return sampler._sample_batch(size, rng)


def _resolve_workers(n_workers) -> int:
    if n_workers is None:
        return max(1, os.cpu_count() or 1)
    return check_count(n_workers, "n_workers")


def _limit_child_threads():
    # Avoid BLAS/OpenMP oversubscription when paths are parallelized at Python level.
    # Respect existing env if the user already configured them.
    for var in THREAD_ENV_VARS:
        os.environ.setdefault(var, "1")


def default_batch_size(m, n, n_workers) -> int:
    """ceil(m / n_workers), capped so one task draws at most MAX_BATCH_ELEMENTS samples."""
    per_worker = -(-int(m) // int(n_workers))
    cap = max(1, MAX_BATCH_ELEMENTS // (2 * next_power_of_two(int(n))))
    return max(1, min(per_worker, cap))


def _make_executor(backend, n_workers):
    if backend == "thread":
        return ThreadPoolExecutor(max_workers=n_workers)
    _limit_child_threads()
    return ProcessPoolExecutor(max_workers=n_workers)


def run_ensemble(sampler, m, seed=None, n_workers=None, backend="thread", batch_size=None, executor=None):
    """
    Draw m independent paths from `sampler` on a worker pool.

    Parameters
    ----------
    sampler : Sampling
        Any object exposing n() and _sample_batch(size, rng).
    m : int
        Number of paths.
    seed : int, SeedSequence or None
        Root seed. None draws fresh OS entropy for every call.
    n_workers : int or None
        Pool size when no executor is given. Defaults to os.cpu_count().
    backend : {"thread", "process"}
        Pool type when no executor is given.
    batch_size : int or None
        Paths per task. Defaults to default_batch_size(m, n, n_workers).
    executor : concurrent.futures.Executor or None
        Reuse an existing pool instead of creating one. It is not shut down.

    Returns
    -------
    paths : np.ndarray, shape (m, sampler.n())
    """
    m = check_count(m, "m")
    if backend not in BACKENDS:
        raise InvalidParameter(f"backend must be one of {BACKENDS}, got {backend!r}")
    workers = _resolve_workers(n_workers)
    if batch_size is None:
        batch_size = default_batch_size(m, sampler.n(), workers)
    batch_size = check_count(batch_size, "batch_size")

    sizes = split_batches(m, batch_size)
    seeds = child_seeds(seed, len(sizes))
    tasks = [(sampler, size, s) for size, s in zip(sizes, seeds)]

    t0 = time.perf_counter()
    if executor is not None:
        outs = _collect(executor, tasks)
    else:
        with _make_executor(backend, workers) as ex:
            outs = _collect(ex, tasks)

    paths = np.vstack(outs)
    logger.info(
        "ensemble %s: m=%d n=%d batches=%d workers=%d backend=%s %.3fs",
        type(sampler).__name__, m, sampler.n(), len(sizes), workers, backend,
        time.perf_counter() - t0,
    )
    return paths


def _collect(executor, tasks):
    futures = [executor.submit(_batch_worker, task) for task in tasks]
    done, pending = wait(futures, return_when=FIRST_EXCEPTION)

    for idx, fut in enumerate(futures):
        if fut in done and fut.exception() is not None:
            for p in pending:
                p.cancel()
            exc = fut.exception()
            logger.error("ensemble batch %d of %d failed: %r", idx, len(futures), exc)
            raise EnsembleFailure(
                f"ensemble batch {idx} failed: {exc}", batch_index=idx
            ) from exc

    outs = []
    for idx, fut in enumerate(futures):
        batch = fut.result()
        logger.debug("ensemble batch %d: %d paths", idx, batch.shape[0])
        outs.append(batch)
    return outs


__all__ = ["run_ensemble", "default_batch_size", "BACKENDS", "MAX_BATCH_ELEMENTS"]
