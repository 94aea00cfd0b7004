"""
elnetpath.grid
--------------
Starting penalty of the path and the (alpha, lambda) grid.
"""

import logging
from typing import NamedTuple
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ._utils import (ConfigurationError,
                     _check_dtype)

# lambda_max is inflated by this factor for every alpha
LAMBDA_MAX_INFLATION = 10


class GridPoint(NamedTuple):

    alpha_index: int
    alpha: float
    lambda_index: int
    lambda_val: float


def check_grid_args(nalpha, nlambda, lambda_min_ratio):
    """
    Validate the grid hyperparameters. Called before any data is touched.
    """
    if int(nlambda) != nlambda or nlambda < 2:
        raise ConfigurationError(f'Must use nlambda > 1, got nlambda={nlambda}')
    if int(nalpha) != nalpha or nalpha < 1:
        raise ConfigurationError(f'Must use nalpha >= 1, got nalpha={nalpha}')
    if not 0 < lambda_min_ratio < 1:
        raise ConfigurationError(f'lambda_min_ratio should be in (0,1), got {lambda_min_ratio}')


def lambda_max0(train_X,
                train_y,
                mean=None,
                dtype=np.float64):
    r"""
    Largest absolute inner product between a feature and the centered
    response,

    $$\max_j |\sum_i X_{ij} (y_i - \bar{y})|.$$

    Parameters
    ----------
    train_X: Union[np.ndarray, scipy.sparse.csc_array]
        Training features.
    train_y: np.ndarray
        Training response.
    mean: Optional[float]
        Center of the response; defaults to the mean of `train_y`.
    dtype: Union[str, np.dtype]
        Precision of the computation.

    Returns
    -------
    float
    """
    dtype = _check_dtype(dtype)
    train_y = np.asarray(train_y, dtype)
    if mean is None:
        mean = train_y.mean(dtype=dtype)
    centered = (train_y - dtype.type(mean)).astype(dtype)
    u = np.asarray(train_X.T @ centered, dtype).reshape(-1)
    value = dtype.type(np.fabs(u).max())

    if not np.isfinite(value) or value <= 0:
        raise ConfigurationError(f'degenerate lambda_max0={value}: no feature is correlated '
                                 'with the response (is the response constant?)')
    return value


def alpha_values(nalpha, dtype=np.float64):
    """
    Mixing parameters equally spaced on [0,1].

    >>> alpha_values(3)
    array([0. , 0.5, 1. ])
    >>> alpha_values(1)
    array([0.5])
    """
    dtype = _check_dtype(dtype)
    if nalpha == 1:
        return np.array([0.5], dtype)
    return (np.arange(nalpha) / (nalpha - 1)).astype(dtype)


def lambda_sequence(lambda_max, lambda_min, nlambda, dtype=np.float64):
    """
    Geometric sequence of `nlambda` values from `lambda_max` down
    to `lambda_min`, i.e. linear interpolation of the logarithms.
    """
    dtype = _check_dtype(dtype)
    if nlambda < 2:
        raise ConfigurationError(f'Must use nlambda > 1, got nlambda={nlambda}')
    i = np.arange(nlambda, dtype=dtype)
    log_max = np.log(dtype.type(lambda_max))
    log_min = np.log(dtype.type(lambda_min))
    return np.exp((log_max * (nlambda - 1 - i) + log_min * i) / dtype.type(nlambda - 1)).astype(dtype)


@dataclass
class PathGrid(object):
    """
    The `(nalpha, nlambda)` grid of hyperparameters.

    Parameters
    ----------
    alphas: np.ndarray
        Mixing parameters, shape `(nalpha,)`.
    lambda_values: np.ndarray
        Descending `lambda` values for each alpha, shape `(nalpha, nlambda)`.
    lambda_max0: float
        Base starting penalty.
    lambda_min_ratio: float
        Ratio of smallest to largest lambda.
    """
    alphas: np.ndarray
    lambda_values: np.ndarray
    lambda_max0: float
    lambda_min_ratio: float

    @property
    def nalpha(self):
        return self.alphas.shape[0]

    @property
    def nlambda(self):
        return self.lambda_values.shape[1]

    @property
    def shape(self):
        return self.lambda_values.shape

    @property
    def size(self):
        return self.lambda_values.size

    def lambdas_for(self, alpha_index):
        return self.lambda_values[alpha_index]

    def points(self, alpha_indices=None):
        if alpha_indices is None:
            alpha_indices = range(self.nalpha)
        for a in alpha_indices:
            for i, l in enumerate(self.lambda_values[a]):
                yield GridPoint(int(a), self.alphas[a], i, l)

    def to_frame(self):
        return pd.DataFrame(list(self.points()),
                            columns=list(GridPoint._fields))


def make_path_grid(nalpha,
                   nlambda,
                   lambda_max0,
                   lambda_min_ratio,
                   dtype=np.float64,
                   logging_=False):
    """
    Build the path grid.

    Every alpha shares the same lambda sequence, running from
    `lambda_max = 10 * lambda_max0` down to
    `lambda_min = lambda_min_ratio * lambda_max`.

    Parameters
    ----------
    nalpha: int
        Number of values of `alpha`.
    nlambda: int
        Number of values of `lambda` per alpha, at least 2.
    lambda_max0: float
        Base starting penalty, see `lambda_max0`.
    lambda_min_ratio: float
        Ratio of smallest to largest lambda, in (0,1).
    dtype: Union[str, np.dtype]
        Precision of the grid.
    logging_: bool
        Write info messages to log?

    Returns
    -------
    PathGrid
    """
    check_grid_args(nalpha, nlambda, lambda_min_ratio)
    dtype = _check_dtype(dtype)
    if not np.isfinite(lambda_max0) or lambda_max0 <= 0:
        raise ConfigurationError(f'degenerate lambda_max0={lambda_max0}')

    alphas = alpha_values(nalpha, dtype)
    lambda_values = np.zeros((nalpha, nlambda), dtype)
    for a in range(nalpha):
        # not scaled by alpha
        lambda_max = dtype.type(LAMBDA_MAX_INFLATION * lambda_max0)
        lambda_min = dtype.type(lambda_min_ratio * lambda_max)
        if logging_:
            logging.info(f'alpha: {alphas[a]:g}, lambda_max: {lambda_max:g}, lambda_min: {lambda_min:g}')
        lambda_values[a] = lambda_sequence(lambda_max, lambda_min, nlambda, dtype)

    return PathGrid(alphas=alphas,
                    lambda_values=lambda_values,
                    lambda_max0=lambda_max0,
                    lambda_min_ratio=lambda_min_ratio)
