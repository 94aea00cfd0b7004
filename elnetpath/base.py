from typing import Optional
from dataclasses import dataclass, field

import numpy as np

from ._utils import ConfigurationError


@dataclass
class SquaredErrorLoss(object):
    r"""
    Loss terms of the training rows: one squared-error term per row,
    anchored at that row's observed target,

    $$\frac{1}{2}\sum_i w_i (\eta_i - y_i)^2.$$

    Parameters
    ----------
    targets: np.ndarray
        Observed targets of the training rows.
    sample_weight: Optional[np.ndarray]
        Weight of each loss term. Default is 1 for every row.
    """
    targets: np.ndarray
    sample_weight: Optional[np.ndarray] = None
    kind: str = field(default='squared_error', init=False)

    def __post_init__(self):
        self.targets = np.asarray(self.targets).reshape(-1)
        if self.sample_weight is None:
            self.sample_weight = np.ones_like(self.targets)
        else:
            self.sample_weight = np.asarray(self.sample_weight,
                                            self.targets.dtype).reshape(-1)
            if self.sample_weight.shape != self.targets.shape:
                raise ConfigurationError('sample_weight should have shape {0}, but has shape {1}'.format(
                    self.targets.shape,
                    self.sample_weight.shape))
            if np.any(self.sample_weight < 0):
                raise ConfigurationError('sample_weight should be non-negative')

    def value(self, eta):
        resid = np.asarray(eta).reshape(-1) - self.targets
        return 0.5 * np.sum(self.sample_weight * resid**2)


@dataclass
class ElNetPenalty(object):
    r"""
    Per-variable elastic net penalty for one (alpha, lambda) grid point,

    $$\sum_j c_j |\beta_j| + \frac{1}{2} e_j \beta_j^2$$

    with `c = alpha * lambda_val * penalty_factor` (L1) and
    `e = (1 - alpha) * lambda_val * penalty_factor` (L2).

    Parameters
    ----------
    alpha: float
        The elasticnet mixing parameter in [0,1].
    lambda_val: float
        A single value for the `lambda` hyperparameter.
    penalty_factor: np.ndarray
        Penalty factor of each variable, as returned by
        `_check_penalty_factor`.
    exclude: Optional[np.ndarray]
        Boolean mask of variables held at zero.
    dtype: np.dtype
        Precision of the penalty coefficients.
    """
    alpha: float
    lambda_val: float
    penalty_factor: np.ndarray
    exclude: Optional[np.ndarray] = None
    dtype: np.dtype = np.float64

    def __post_init__(self):
        self.penalty_factor = np.asarray(self.penalty_factor, self.dtype).reshape(-1)
        nvars = self.penalty_factor.shape[0]
        if self.exclude is None:
            self.exclude = np.zeros(nvars, bool)
        self.l1 = np.zeros(nvars, self.dtype)
        self.l2 = np.zeros(nvars, self.dtype)
        self.update(self.lambda_val)

    @property
    def nvars(self):
        return self.penalty_factor.shape[0]

    def update(self, lambda_val):
        """
        Set a new `lambda_val`, rewriting the penalty coefficients in place.
        """
        self.lambda_val = lambda_val
        self.l1[:] = self.alpha * lambda_val * self.penalty_factor
        self.l2[:] = (1 - self.alpha) * lambda_val * self.penalty_factor
        return self

    @property
    def is_uniform(self):
        return (np.all(self.l1 == self.l1[0]) and
                np.all(self.l2 == self.l2[0]) and
                not np.any(self.exclude))

    def value(self, coef):
        coef = np.asarray(coef).reshape(-1)
        if np.any(coef[self.exclude] != 0):
            return np.inf
        return (self.l1 * np.fabs(coef)).sum() + 0.5 * (self.l2 * coef**2).sum()


def _check_penalty_factor(penalty_factor, nvars):
    """Check and rescale penalty factors.

    Parameters
    ----------
    penalty_factor : array-like, optional
        Penalty factors for each variable.
    nvars : int
        Number of variables.

    Returns
    -------
    vp : np.ndarray
        Penalty factors rescaled to sum to `nvars`.
    exclude : np.ndarray
        Boolean mask of variables with infinite penalty factor.
    """

    if penalty_factor is None:
        return np.ones(nvars), np.zeros(nvars, bool)

    penalty_factor = np.array(penalty_factor, float).reshape(-1)
    if penalty_factor.shape in [(), (1,)]:
        penalty_factor = penalty_factor[0] * np.ones(nvars)

    if penalty_factor.shape[0] != nvars:
        raise ConfigurationError('penalty_factor should have shape {0}, but has shape {1}'.format((nvars,),
                                                                                              penalty_factor.shape))

    exclude = np.isinf(penalty_factor)
    if np.all(exclude):
        raise ConfigurationError('all variables excluded by infinite penalty factors')
    penalty_factor[exclude] = 1 # now can change penalty_factor

    vp = np.maximum(0, penalty_factor)
    if vp.sum() > 0:
        vp = vp * nvars / vp.sum()

    return vp, exclude
