import logging
import time

from dataclasses import dataclass, field
from typing import Union, Optional, TextIO

import numpy as np

from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_is_fitted

from .base import _check_penalty_factor
from .device import HostData
from .dispatch import (SolvePlan,
                       dispatch,
                       resolve_n_workers)
from .grid import (check_grid_args,
                   lambda_max0,
                   make_path_grid)
from .reporter import RunReporter
from .solver import (SolverControl,
                     _get_solver)
from .split import (train_valid_split,
                    split_sizes)
from ._utils import (ConfigurationError,
                     _check_dtype,
                     _check_order)
from .docstrings import add_dataclass_docstring


@dataclass
class PathSearchControl(object):
    """Control parameters for a path search run."""

    logging: bool = False
    progress: bool = False
    stream: Optional[TextIO] = None

add_dataclass_docstring(PathSearchControl)


@dataclass
class PathSearchSpec(object):
    """Specification of an elastic net path search."""

    nalpha: int
    nlambda: int
    valid_fraction: float
    lambda_min_ratio: float
    n_workers: Optional[int] = None
    n_devices: Optional[int] = None
    order: str = 'r'
    dtype: Union[str, np.dtype] = 'double'
    standardize_response: bool = False
    penalty_factor: Optional[np.ndarray] = None
    solver: Union[str, type] = 'cd'
    solver_control: SolverControl = field(default_factory=SolverControl)
    control: PathSearchControl = field(default_factory=PathSearchControl)

add_dataclass_docstring(PathSearchSpec, subs={'solver_control':'control_solver',
                                              'control':'control_path_search'})


@dataclass
class ElNetPathSearch(BaseEstimator,
                      PathSearchSpec):
    """
    Elastic net regularization path over a grid of `(alpha, lambda)`.

    The data are split head/tail into training and validation rows,
    the grid is built from the largest correlation of a feature with
    the response, and the alpha columns of the grid are solved in
    parallel, one worker per device. Each grid point yields one
    `PathRecord` with the number of active variables and the training
    and validation RMSE.
    """

    def fit(self,
            X,
            y,
            sample_weight=None,
            reporter=None):
        """
        Solve every point of the grid.

        Parameters
        ----------
        X: Union[np.ndarray, scipy.sparse.csc_array]
            Input matrix, of shape `(nobs, nvars)`, or a flat buffer
            of length `nobs*nvars` laid out according to `order`.
        y: np.ndarray
            Response variable.
        sample_weight: Optional[np.ndarray]
            Weights of the loss terms, one per row of `X`. Only the
            training rows are used.
        reporter: Optional[RunReporter]
            Sink for the records. If None, one is created from `control`.

        Returns
        -------
        self: object
            ElNetPathSearch class instance.
        """
        t0 = time.perf_counter()

        # nothing below touches the data until the arguments check out
        self._check_args()
        dtype = _check_dtype(self.dtype)
        control = self.control

        self.split_ = split = train_valid_split(X,
                                                y,
                                                self.valid_fraction,
                                                dtype=dtype,
                                                order=self.order,
                                                standardize_response=self.standardize_response,
                                                logging_=control.logging)

        self.lambda_max0_ = lambda_max0(split.train_X,
                                        split.train_y,
                                        dtype=dtype)
        if control.logging: logging.info(f'lambda_max0 {self.lambda_max0_}')

        self.grid_ = grid = make_path_grid(self.nalpha,
                                           self.nlambda,
                                           self.lambda_max0_,
                                           self.lambda_min_ratio,
                                           dtype=dtype,
                                           logging_=control.logging)

        penalty_factor, exclude = _check_penalty_factor(self.penalty_factor,
                                                        split.n_features)

        if sample_weight is not None:
            sample_weight = np.asarray(sample_weight, dtype).reshape(-1)
            if sample_weight.shape[0] != split.n_train + split.n_valid:
                raise ConfigurationError('sample_weight should have shape {0}, but has shape {1}'.format(
                    (split.n_train + split.n_valid,),
                    sample_weight.shape))
            sample_weight = sample_weight[:split.n_train]

        self.n_workers_ = n_workers = resolve_n_workers(self.n_workers, self.n_devices)
        if control.logging: logging.info(f'Number of workers: {n_workers}')

        if reporter is None:
            reporter = RunReporter(stream=control.stream,
                                   progress=control.progress,
                                   total=grid.size,
                                   logging_=control.logging)
        self.reporter_ = reporter

        plan = SolvePlan(source=HostData.from_split(split, order=self.order),
                         grid=grid,
                         penalty_factor=penalty_factor,
                         exclude=exclude,
                         sample_weight=sample_weight,
                         split=split,
                         solver=_get_solver(self.solver),
                         solver_control=self.solver_control,
                         dtype=dtype,
                         logging=control.logging)

        t1 = time.perf_counter()
        try:
            self.assignments_, results = dispatch(plan, reporter, n_workers)
        finally:
            reporter.close()

        tf = time.perf_counter()

        self.records_ = reporter.records
        self.summary_ = reporter.to_frame()
        self.stage_times_ = np.array([r.stage_time for r in results])
        self.solve_time_ = tf - t1
        self.wall_time_ = tf - t0

        if control.logging:
            logging.info(f'END SOLVE: mTrain {split.n_train} n {split.n_features} mValid {split.n_valid} '
                         f'twall {self.wall_time_:g} tsolve {self.solve_time_:g}')
        return self

    def path(self, alpha_index):
        """
        Records of one alpha column, in lambda order.
        """
        check_is_fitted(self, ["summary_"])
        df = self.summary_
        return df[df['alpha_index'] == alpha_index].sort_values('lambda_index').reset_index(drop=True)

    def plot_path(self,
                  metric='valid_rmse',
                  ax=None,
                  legend=True):
        """
        Plot `metric` against `-log(lambda)`, one line per alpha.

        Parameters
        ----------
        metric: str
            One of "train_rmse", "valid_rmse" or "dof".
        ax: Optional[matplotlib.axes.Axes]
            Axes to draw on.
        legend: bool
            Draw a legend of the alpha values?

        Returns
        -------
        ax: matplotlib.axes.Axes
        """
        check_is_fitted(self, ["summary_"])
        if metric not in ['train_rmse', 'valid_rmse', 'dof']:
            raise ValueError("metric should be one of 'train_rmse', 'valid_rmse', 'dof'")

        df = self.summary_.copy()
        df['-log(lambda)'] = -np.log(df['lambda_val'])
        soln_path = df.pivot_table(index='-log(lambda)',
                                   columns='alpha',
                                   values=metric)
        index_name = r'$-\log(\lambda)$'
        soln_path.index.name = index_name
        soln_path.columns = [r'$\alpha$={:g}'.format(a) for a in soln_path.columns]
        ax = soln_path.plot(ax=ax, legend=legend)
        ax.set_xlabel(index_name)
        ax.set_ylabel({'train_rmse':'Training RMSE',
                       'valid_rmse':'Validation RMSE',
                       'dof':'Degrees of Freedom'}[metric])
        return ax

    # private methods

    def _check_args(self):
        check_grid_args(self.nalpha, self.nlambda, self.lambda_min_ratio)
        if not 0 <= self.valid_fraction < 1:
            raise ConfigurationError(f'valid_fraction should be in [0,1), got {self.valid_fraction}')
        _check_order(self.order)
        _check_dtype(self.dtype)
        _get_solver(self.solver)
        if self.n_workers is not None and self.n_workers < 1:
            raise ConfigurationError(f'n_workers should be at least 1, got {self.n_workers}')


def check_run_args(nobs,
                   nalpha,
                   nlambda,
                   valid_fraction,
                   lambda_min_ratio):
    """
    Validate the entry parameters of a run, including the split size,
    without any data.
    """
    check_grid_args(nalpha, nlambda, lambda_min_ratio)
    return split_sizes(nobs, valid_fraction)
