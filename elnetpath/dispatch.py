"""
elnetpath.dispatch
------------------
Static assignment of alpha columns to workers and the per-worker
solve-and-score loop.

Alphas, not lambdas, are the unit of parallelism: a worker stages its
data once and reuses it (and the solver's factorization and warm start)
along the whole lambda sequence of every alpha it owns.
"""

import logging
import time
import warnings

from typing import Optional
from dataclasses import dataclass, field

import numpy as np
from joblib import Parallel, delayed

from .base import (ElNetPenalty,
                   SquaredErrorLoss)
from .device import (DeviceData,
                     available_devices)
from .reporter import PathRecord
from .scoring import score_coefficients
from .solver import (CoordinateDescentSolver,
                     SolverControl)
from ._utils import ConfigurationError


def resolve_n_workers(requested=None, available=None):
    """
    Number of workers: the smaller of `requested` and `available`
    devices.
    """
    if available is None:
        available = available_devices()
    if available < 1:
        raise ConfigurationError(f'no devices available, got {available}')
    if requested is None:
        return int(available)
    if requested < 1:
        raise ConfigurationError(f'n_workers should be at least 1, got {requested}')
    return int(min(requested, available))


def partition_alphas(nalpha, n_workers):
    """
    Split alpha indices `0, ..., nalpha-1` into `n_workers`
    contiguous blocks, in order.

    >>> partition_alphas(5, 2)
    [[0, 1, 2], [3, 4]]
    """
    if nalpha % n_workers != 0:
        msg = (f"Number of alphas ({nalpha}) not evenly divisible by number of workers "
               f"({n_workers}), so not efficient use of devices.")
        logging.warning(msg)
        warnings.warn(msg)
    return [list(map(int, block)) for block in np.array_split(np.arange(nalpha), n_workers)]


@dataclass
class SolvePlan(object):
    """
    Read-only inputs shared by every worker of a run.

    Parameters
    ----------
    source: HostData
        Immutable source data.
    grid: PathGrid
        The (alpha, lambda) grid.
    penalty_factor: np.ndarray
        Rescaled penalty factors, shape `(nvars,)`.
    exclude: np.ndarray
        Boolean mask of excluded variables.
    sample_weight: Optional[np.ndarray]
        Weights of the loss terms.
    split: Optional[TrainValidSplit]
        Maps a standardized response back to its original scale when scoring.
    solver: type
        Solver backend class.
    solver_control: SolverControl
        Parameters to control the solver.
    dtype: np.dtype
        Precision of the run.
    logging: bool
        Write info messages to log?
    """
    source: object
    grid: object
    penalty_factor: np.ndarray
    exclude: np.ndarray
    sample_weight: Optional[np.ndarray] = None
    split: Optional[object] = None
    solver: type = CoordinateDescentSolver
    solver_control: SolverControl = field(default_factory=SolverControl)
    dtype: np.dtype = np.dtype(np.float64)
    logging: bool = False


@dataclass
class WorkerResult(object):

    worker_id: int
    alpha_indices: list
    n_points: int = 0
    stage_time: float = 0.
    solve_time: float = 0.


def run_worker(worker_id,
               alpha_indices,
               plan,
               reporter):
    """
    Stage a replica of the data on device `worker_id`, then solve and
    score every lambda of each alpha in `alpha_indices`, in order.

    Parameters
    ----------
    worker_id: int
        Worker (and device) index.
    alpha_indices: list
        Alpha columns owned by the worker.
    plan: SolvePlan
        Shared inputs of the run.
    reporter: RunReporter
        Sink for the records.

    Returns
    -------
    WorkerResult
    """
    result = WorkerResult(worker_id=worker_id,
                          alpha_indices=list(alpha_indices))
    if len(alpha_indices) == 0:
        if plan.logging: logging.info(f'Worker {worker_id} has no alphas; not staging data')
        return result

    data = DeviceData.stage(plan.source,
                            worker_id,
                            dtype=plan.dtype,
                            logging_=plan.logging)
    result.stage_time = data.stage_time

    # same loss terms for every grid point
    loss = SquaredErrorLoss(data.get_train_y(),
                            plan.sample_weight)

    t0 = time.perf_counter()
    if plan.logging: logging.info(f'Worker {worker_id}: BEGIN SOLVE')

    with plan.solver.create(data, loss, control=plan.solver_control) as solver:
        for a in alpha_indices:
            alpha = plan.grid.alphas[a]
            lambdas = plan.grid.lambdas_for(a)
            penalty = ElNetPenalty(alpha=alpha,
                                   lambda_val=lambdas[0],
                                   penalty_factor=plan.penalty_factor,
                                   exclude=plan.exclude,
                                   dtype=plan.dtype)

            if plan.logging: logging.info(f'Worker {worker_id}: alpha {alpha:g}')

            for i, lambda_val in enumerate(lambdas):
                penalty.update(lambda_val)
                coef = solver.solve(penalty)
                score = score_coefficients(coef, data, split=plan.split)
                reporter.emit(PathRecord(worker_id=worker_id,
                                         alpha_index=a,
                                         alpha=float(alpha),
                                         lambda_index=i,
                                         lambda_val=float(lambda_val),
                                         dof=score.dof,
                                         train_rmse=float(score.train_rmse),
                                         valid_rmse=float(score.valid_rmse)))
                result.n_points += 1

    result.solve_time = time.perf_counter() - t0
    if plan.logging: logging.info(f'Worker {worker_id}: END SOLVE, {result.n_points} points in {result.solve_time:g} secs')
    return result


def dispatch(plan,
             reporter,
             n_workers):
    """
    Run the grid of `plan` on `n_workers` parallel workers.

    The alpha columns are partitioned before any solve starts;
    each worker runs on its own thread. A failure on any worker is
    raised once the pool has shut down.

    Returns
    -------
    assignments: list
        Alpha indices of each worker.
    results: list
        `WorkerResult` of each worker.
    """
    assignments = partition_alphas(plan.grid.nalpha, n_workers)
    results = Parallel(n_jobs=n_workers,
                       backend='threading')(delayed(run_worker)(worker_id, block, plan, reporter)
                                            for worker_id, block in enumerate(assignments))
    return assignments, list(results)
