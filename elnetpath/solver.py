r"""
elnetpath.solver
----------------
Solver backends for the penalized least-squares problem

$$\frac{1}{2}\sum_i w_i (x_i^T\beta - y_i)^2 + \sum_j c_j|\beta_j| + \frac{1}{2}e_j\beta_j^2.$$

A solver is bound to one worker's data replica for its whole life:
`create` it from a `DeviceData` and a `SquaredErrorLoss`, call `solve`
once per penalty (each call may warm start from the previous
coefficients) and `destroy` it when the worker is done.
"""

import logging

from typing import Optional
from dataclasses import dataclass

import numpy as np
import scipy.sparse

from sklearn.linear_model import (ElasticNet,
                                  LinearRegression)

from .base import SquaredErrorLoss
from ._utils import (ConfigurationError,
                     SolverError,
                     _solver_error_message)
from .docstrings import add_dataclass_docstring


@dataclass
class SolverControl(object):
    """Control parameters for the solver backends."""

    thresh: float = 1e-7
    maxit: int = 100000
    warm_start: bool = True
    covariance: Optional[bool] = None
    logging: bool = False

add_dataclass_docstring(SolverControl)


class Solver(object):
    """
    Base class of the solver backends.

    Parameters
    ----------
    data: DeviceData
        The worker's data replica. Only the training rows are used.
    loss: SquaredErrorLoss
        Loss terms of the training rows.
    control: SolverControl, optional
        Parameters to control the solver.
    """

    def __init__(self,
                 data,
                 loss,
                 control=None):

        if control is None:
            control = SolverControl()
        self.control = control
        self.data = data
        self.dtype = data.dtype

        X = data.get_train_X()
        if not isinstance(loss, SquaredErrorLoss):
            loss = SquaredErrorLoss(loss)
        if loss.targets.shape[0] != X.shape[0]:
            raise ConfigurationError('loss has {0} terms but data has {1} training rows'.format(
                loss.targets.shape[0],
                X.shape[0]))

        self.X = X
        self.y = np.asarray(loss.targets, self.dtype)
        self.sample_weight = np.asarray(loss.sample_weight, self.dtype)
        self.loss = loss
        self.coef_ = None
        self.n_iter_ = 0
        self.n_solves_ = 0

    @classmethod
    def create(cls, data, loss, control=None):
        return cls(data, loss, control=control)

    def solve(self, penalty):
        raise NotImplementedError

    def objective(self, coef, penalty):
        """
        Penalized loss of `coef` on the training rows.
        """
        self._check_alive()
        eta = np.asarray(self.X @ np.asarray(coef, self.dtype)).reshape(-1)
        return self.loss.value(eta) + penalty.value(coef)

    def destroy(self):
        """
        Release the references to the data replica and any
        factorization computed from it.
        """
        self.X = self.y = self.sample_weight = None
        self.data = None
        self.coef_ = None

    @property
    def destroyed(self):
        return self.data is None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.destroy()
        return False

    # private methods

    def _check_alive(self):
        if self.destroyed:
            raise SolverError('solver has been destroyed')

    def _check_penalty(self, penalty):
        nvars = self.X.shape[1]
        if penalty.nvars != nvars:
            raise ConfigurationError('penalty has {0} terms but data has {1} variables'.format(
                penalty.nvars,
                nvars))

    def _initial_coef(self):
        nvars = self.X.shape[1]
        if self.control.warm_start and self.coef_ is not None:
            return self.coef_.copy()
        return np.zeros(nvars, self.dtype)

    def _finalize(self, coef, penalty):
        coef = np.asarray(coef, self.dtype).reshape(-1)
        if not np.all(np.isfinite(coef)):
            raise SolverError(_solver_error_message(1,
                                                    self.control.maxit,
                                                    alpha=penalty.alpha,
                                                    lambda_val=penalty.lambda_val))
        coef[penalty.exclude] = 0
        self.coef_ = coef
        self.n_solves_ += 1
        if self.control.logging: logging.debug(f'Solve {self.n_solves_}: objective {self.objective(coef, penalty):g}')
        return coef.copy()

    def _unpenalized(self, penalty):
        # can use LinearRegression

        keep = ~penalty.exclude
        X = self.X
        if scipy.sparse.issparse(X):
            X_k = scipy.sparse.csc_array(X)[:, keep]
        else:
            X_k = X[:, keep]
        lm = LinearRegression(fit_intercept=False)
        lm.fit(X_k, self.y, self.sample_weight)
        coef = np.zeros(X.shape[1], self.dtype)
        coef[keep] = lm.coef_
        self.n_iter_ = 0
        return coef


class CoordinateDescentSolver(Solver):
    """
    Cyclic coordinate descent.

    With covariance updates the weighted Gram matrix `X'WX` and
    `X'Wy` are computed once, when the solver is created, and reused
    for every subsequent solve. With naive updates only the column
    norms are precomputed and a weighted residual is kept up to date.

    Each solve sweeps over all variables until the largest weighted
    squared change of a coefficient is below `thresh` times
    the weighted sum of squares of the response.

    Parameters
    ----------
    data: DeviceData
        The worker's data replica. Only the training rows are used.
    loss: SquaredErrorLoss
        Loss terms of the training rows.
    control: SolverControl, optional
        Parameters to control the solver.
    """

    def __init__(self,
                 data,
                 loss,
                 control=None):

        super().__init__(data, loss, control=control)

        X, w, y = self.X, self.sample_weight, self.y
        nvars = X.shape[1]

        covariance = self.control.covariance
        if covariance is None:
            covariance = nvars < 500
        if scipy.sparse.issparse(X):
            covariance = True
        self.covariance = covariance

        if covariance:
            if scipy.sparse.issparse(X):
                WX = scipy.sparse.diags(w) @ X
                gram = scipy.sparse.csc_array(X.T @ WX).toarray()
            else:
                gram = X.T @ (w[:, None] * X)
            self._gram = np.asarray(gram, self.dtype)
            self._Xty = np.asarray(X.T @ (w * y), self.dtype).reshape(-1)
            self._xv = np.diag(self._gram).copy()
        else:
            self._xv = np.asarray((w[:, None] * X**2).sum(0), self.dtype)

        self._ysq = float(np.sum(w * y.astype(np.float64)**2))

    def solve(self, penalty):
        """
        Solve at one penalty.

        Parameters
        ----------
        penalty: ElNetPenalty
            Per-variable L1 and L2 coefficients.

        Returns
        -------
        coef: np.ndarray
            Coefficients, shape `(nvars,)`.

        Raises
        ------
        SolverError
            On non-convergence within `maxit` passes or non-finite
            coefficients.
        """
        self._check_alive()
        self._check_penalty(penalty)

        l1 = np.asarray(penalty.l1, self.dtype)
        l2 = np.asarray(penalty.l2, self.dtype)

        if np.all(l1 == 0) and np.all(l2 == 0):
            coef = self._unpenalized(penalty)
            return self._finalize(coef, penalty)

        coef = self._initial_coef()
        coef[penalty.exclude] = 0
        active = np.nonzero(~penalty.exclude)[0]

        if self.control.logging: logging.debug(f'Solver warm coef: {coef}')

        if self.covariance:
            self._cov_sweeps(coef, l1, l2, active, penalty)
        else:
            self._naive_sweeps(coef, l1, l2, active, penalty)

        if self.control.logging: logging.debug(f'Solver coef: {coef}, passes: {self.n_iter_}')

        return self._finalize(coef, penalty)

    def destroy(self):
        self._gram = self._Xty = None
        super().destroy()

    # private methods

    def _converged(self, dlx):
        return dlx <= self.control.thresh * self._ysq

    def _cov_sweeps(self, coef, l1, l2, active, penalty):

        G, xv = self._gram, self._xv
        grad = self._Xty - G @ coef # X'W(y - X coef)

        for it in range(self.control.maxit):
            dlx = 0.
            for j in active:
                denom = xv[j] + l2[j]
                if denom <= 0:
                    continue
                cj = coef[j]
                z = grad[j] + xv[j] * cj
                new = np.sign(z) * max(abs(z) - l1[j], 0) / denom
                d = new - cj
                if d != 0:
                    coef[j] = new
                    grad -= d * G[:, j]
                    dlx = max(dlx, xv[j] * d * d)
            if self._converged(dlx):
                self.n_iter_ = it + 1
                return coef

        self.n_iter_ = self.control.maxit
        raise SolverError(_solver_error_message(-1,
                                                self.control.maxit,
                                                alpha=penalty.alpha,
                                                lambda_val=penalty.lambda_val))

    def _naive_sweeps(self, coef, l1, l2, active, penalty):

        X, w, xv = self.X, self.sample_weight, self._xv
        resid = w * (self.y - X @ coef) # weighted residual

        for it in range(self.control.maxit):
            dlx = 0.
            for j in active:
                denom = xv[j] + l2[j]
                if denom <= 0:
                    continue
                x_j = X[:, j]
                cj = coef[j]
                z = x_j @ resid + xv[j] * cj
                new = np.sign(z) * max(abs(z) - l1[j], 0) / denom
                d = new - cj
                if d != 0:
                    coef[j] = new
                    resid -= d * w * x_j
                    dlx = max(dlx, xv[j] * d * d)
            if self._converged(dlx):
                self.n_iter_ = it + 1
                return coef

        self.n_iter_ = self.control.maxit
        raise SolverError(_solver_error_message(-1,
                                                self.control.maxit,
                                                alpha=penalty.alpha,
                                                lambda_val=penalty.lambda_val))


class SklearnElasticNetSolver(Solver):
    """
    Backend wrapping `sklearn.linear_model.ElasticNet`.

    sklearn penalizes every coefficient equally, so the per-variable
    penalty must be uniform. The problem is divided by the total
    weight to match sklearn's parametrization.
    """

    def __init__(self,
                 data,
                 loss,
                 control=None):
        super().__init__(data, loss, control=control)
        self._weight_sum = float(self.sample_weight.sum())
        self._estimator = None

    def solve(self, penalty):

        self._check_alive()
        self._check_penalty(penalty)

        if not penalty.is_uniform:
            raise ConfigurationError('SklearnElasticNetSolver needs the same penalty for every variable')

        c, e = float(penalty.l1[0]), float(penalty.l2[0])
        if c + e == 0:
            return self._finalize(self._unpenalized(penalty), penalty)

        alpha_ = (c + e) / self._weight_sum
        l1_ratio = c / (c + e)

        if self._estimator is None or not self.control.warm_start:
            self._estimator = ElasticNet(alpha=alpha_,
                                         l1_ratio=l1_ratio,
                                         fit_intercept=False,
                                         precompute=bool(self.control.covariance) and not scipy.sparse.issparse(self.X),
                                         max_iter=int(self.control.maxit),
                                         tol=float(self.control.thresh),
                                         warm_start=True)
        else:
            self._estimator.set_params(alpha=alpha_,
                                       l1_ratio=l1_ratio)

        self._estimator.fit(self.X, self.y, sample_weight=self.sample_weight)
        self.n_iter_ = int(self._estimator.n_iter_)
        if self.n_iter_ >= self.control.maxit:
            raise SolverError(_solver_error_message(-1,
                                                    self.control.maxit,
                                                    alpha=penalty.alpha,
                                                    lambda_val=penalty.lambda_val))

        if self.control.logging: logging.debug(f'ElasticNet coef: {self._estimator.coef_}, passes: {self.n_iter_}')

        return self._finalize(self._estimator.coef_, penalty)

    def destroy(self):
        self._estimator = None
        super().destroy()


SOLVERS = {'cd': CoordinateDescentSolver,
           'sklearn': SklearnElasticNetSolver}


def _get_solver(solver):
    if isinstance(solver, str):
        if solver not in SOLVERS:
            raise ConfigurationError(f"unknown solver '{solver}', use one of {sorted(SOLVERS)}")
        return SOLVERS[solver]
    return solver
