"""
elnetpath.split
---------------
Head/tail train-validation split of a combined dataset, and summary
statistics of the response.
"""

import logging
import warnings

from typing import Optional, Union
from dataclasses import dataclass

import numpy as np
import scipy.sparse
from sklearn.utils import check_X_y

from ._utils import (ConfigurationError,
                     _check_dtype,
                     _check_order)


@dataclass(frozen=True)
class ResponseStats(object):
    """
    Mean and sample standard deviation (`n-1` denominator) of a response.
    """
    mean: float
    sd: float
    nobs: int

    @classmethod
    def from_response(cls, y, dtype=np.float64):
        dtype = np.dtype(dtype)
        y = np.asarray(y)
        nobs = y.shape[0]
        mean = dtype.type(y.sum(dtype=np.float64) / nobs)
        if nobs < 2:
            warnings.warn('sample standard deviation undefined for a single observation; reporting 0')
            sd = dtype.type(0)
        else:
            var = ((y.astype(np.float64) - mean)**2).sum() / (nobs - 1)
            sd = dtype.type(np.sqrt(var))
        return cls(mean=mean, sd=sd, nobs=nobs)


@dataclass
class TrainValidSplit(object):
    """
    Training and validation views of a dataset.

    Parameters
    ----------
    train_X: Union[np.ndarray, scipy.sparse.csc_array]
        Features of the first `n_train` rows.
    train_y: np.ndarray
        Response of the first `n_train` rows.
    valid_X: Union[np.ndarray, scipy.sparse.csc_array]
        Features of the last `n_valid` rows.
    valid_y: np.ndarray
        Response of the last `n_valid` rows.
    train_stats: ResponseStats
        Statistics of the original training response.
    valid_stats: Optional[ResponseStats]
        Statistics of the original validation response, None if
        there are no validation rows.
    standardized: bool
        Were `train_y` and `valid_y` centered and scaled by
        `train_stats`?
    """
    train_X: Union[np.ndarray, scipy.sparse.csc_array]
    train_y: np.ndarray
    valid_X: Union[np.ndarray, scipy.sparse.csc_array]
    valid_y: np.ndarray
    train_stats: ResponseStats
    valid_stats: Optional[ResponseStats] = None
    standardized: bool = False

    @property
    def n_train(self):
        return self.train_y.shape[0]

    @property
    def n_valid(self):
        return self.valid_y.shape[0]

    @property
    def n_features(self):
        return self.train_X.shape[1]

    def unstandardize(self, prediction):
        """
        Map predictions on the (possibly standardized) solver scale
        back to the scale of the original response.
        """
        if not self.standardized:
            return prediction
        return prediction * self.train_stats.sd + self.train_stats.mean


def split_sizes(nobs, valid_fraction):
    """
    Number of training and validation rows for a head/tail split.

    >>> split_sizes(100, 0.2)
    (80, 20)
    """
    if not 0 <= valid_fraction < 1:
        raise ConfigurationError(f'valid_fraction should be in [0,1), got {valid_fraction}')
    n_valid = int(np.floor(nobs * valid_fraction))
    n_train = nobs - n_valid
    if n_train <= 0:
        raise ConfigurationError(f'no training rows: nobs={nobs}, valid_fraction={valid_fraction}')
    return n_train, n_valid


def as_matrix(X, nobs, order='r'):
    """
    Reshape a flat buffer of length `nobs*nvars` into a matrix,
    reading it row-major (`order='r'`) or column-major (`order='c'`).
    Matrices are returned unchanged.
    """
    if scipy.sparse.issparse(X):
        return X
    X = np.asarray(X)
    if X.ndim == 1:
        if nobs == 0 or X.shape[0] % nobs != 0:
            raise ConfigurationError(f'buffer of length {X.shape[0]} is not a matrix with {nobs} rows')
        X = X.reshape((nobs, -1), order=_check_order(order))
    return X


def train_valid_split(X,
                      y,
                      valid_fraction,
                      dtype=np.float64,
                      order='r',
                      standardize_response=False,
                      logging_=False):
    """
    Split `(X, y)` into training rows `[0, n_train)` and validation
    rows `[n_train, nobs)`, preserving row order.

    Parameters
    ----------
    X: Union[np.ndarray, scipy.sparse.csc_array]
        Input matrix, of shape `(nobs, nvars)`, or a flat buffer read
        with `order`.
    y: np.ndarray
        Response variable.
    valid_fraction: float
        Fraction of rows held out for validation, in [0,1).
    dtype: Union[str, np.dtype]
        Precision of the returned arrays.
    order: str
        'r' (row-major) or 'c' (column-major), used only if `X` is flat.
    standardize_response: bool
        Center and scale both responses by the training mean and
        standard deviation? Default is False.
    logging_: bool
        Write info messages to log?

    Returns
    -------
    TrainValidSplit
    """
    dtype = _check_dtype(dtype)
    y = np.asarray(y).reshape(-1)
    X = as_matrix(X, y.shape[0], order=order)

    X, y = check_X_y(X, y,
                     accept_sparse=['csc', 'csr'],
                     dtype=dtype,
                     multi_output=False,
                     y_numeric=True)
    y = y.astype(dtype, copy=False)
    nobs = X.shape[0]
    n_train, n_valid = split_sizes(nobs, valid_fraction)

    if scipy.sparse.issparse(X):
        X = scipy.sparse.csr_array(X)
        train_X = scipy.sparse.csc_array(X[:n_train])
        valid_X = scipy.sparse.csc_array(X[n_train:])
    else:
        train_X = X[:n_train]
        valid_X = X[n_train:]
    train_y = y[:n_train].copy()
    valid_y = y[n_train:].copy()

    train_stats = ResponseStats.from_response(train_y, dtype)
    if n_valid > 0:
        valid_stats = ResponseStats.from_response(valid_y, dtype)
    else:
        valid_stats = None

    if logging_:
        logging.info(f'Rows in training data: {n_train}')
        logging.info(f'Mean trainY: {train_stats.mean}, StdDev trainY: {train_stats.sd}')
        if valid_stats is not None:
            logging.info(f'Rows in validation data: {n_valid}')
            logging.info(f'Mean validY: {valid_stats.mean}, StdDev validY: {valid_stats.sd}')

    if standardize_response:
        if not train_stats.sd > 0:
            raise ConfigurationError('training response has zero standard deviation; cannot standardize')
        # validation uses the fitted training transform
        train_y = ((train_y - train_stats.mean) / train_stats.sd).astype(dtype)
        valid_y = ((valid_y - train_stats.mean) / train_stats.sd).astype(dtype)

    return TrainValidSplit(train_X=train_X,
                           train_y=train_y,
                           valid_X=valid_X,
                           valid_y=valid_y,
                           train_stats=train_stats,
                           valid_stats=valid_stats,
                           standardized=standardize_response)
