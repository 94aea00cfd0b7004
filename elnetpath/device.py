"""
elnetpath.device
----------------
Source data and its per-worker device replicas.

A run holds one immutable `HostData`. Each worker stages its own
`DeviceData` replica from it, bound to one device, and is the only
reader of that replica for the duration of the run.
"""

import logging
import time

from typing import Union
from dataclasses import dataclass

import numpy as np
import scipy.sparse
from joblib import cpu_count

from ._utils import (ConfigurationError,
                     ResourceError,
                     _check_dtype,
                     _check_order)


def available_devices():
    """
    Number of devices workers can be bound to.
    """
    return cpu_count()


def _freeze(A):
    if scipy.sparse.issparse(A):
        for arr in (A.data, A.indices, A.indptr):
            arr.flags.writeable = False
    else:
        A.flags.writeable = False
    return A


@dataclass(frozen=True)
class HostData(object):
    """
    Immutable host-resident source of the training and validation data.

    Parameters
    ----------
    train_X: Union[np.ndarray, scipy.sparse.csc_array]
        Training features, shape `(n_train, nvars)`.
    train_y: np.ndarray
        Training response.
    valid_X: Union[np.ndarray, scipy.sparse.csc_array]
        Validation features, shape `(n_valid, nvars)`.
    valid_y: np.ndarray
        Validation response.
    order: str
        'r' (row-major) or 'c' (column-major) layout of replicas.
    """
    train_X: Union[np.ndarray, scipy.sparse.csc_array]
    train_y: np.ndarray
    valid_X: Union[np.ndarray, scipy.sparse.csc_array]
    valid_y: np.ndarray
    order: str = 'r'

    def __post_init__(self):
        _check_order(self.order)
        for name in ['train_X', 'train_y', 'valid_X', 'valid_y']:
            value = getattr(self, name)
            if scipy.sparse.issparse(value):
                value = scipy.sparse.csc_array(value, copy=True)
            else:
                value = np.array(value)
            object.__setattr__(self, name, _freeze(value))
        if self.train_X.shape[0] != self.train_y.shape[0]:
            raise ConfigurationError('train_X and train_y have different numbers of rows')
        if self.valid_X.shape[0] != self.valid_y.shape[0]:
            raise ConfigurationError('valid_X and valid_y have different numbers of rows')

    @classmethod
    def from_split(cls, split, order='r'):
        return cls(train_X=split.train_X,
                   train_y=split.train_y,
                   valid_X=split.valid_X,
                   valid_y=split.valid_y,
                   order=order)

    @property
    def n_train(self):
        return self.train_y.shape[0]

    @property
    def n_valid(self):
        return self.valid_y.shape[0]

    @property
    def n_features(self):
        return self.train_X.shape[1]


def _stage_array(A, dtype, order):
    if scipy.sparse.issparse(A):
        return scipy.sparse.csc_array(A, dtype=dtype, copy=True)
    return np.array(A, dtype=dtype, order=order, copy=True)


class DeviceData(object):
    """
    A worker's exclusively owned replica of a `HostData`, bound
    to device `device_id`.

    Use `DeviceData.stage` to create one.
    """

    def __init__(self,
                 device_id,
                 train_X,
                 train_y,
                 valid_X,
                 valid_y,
                 order='r'):
        self.device_id = device_id
        self.order = order
        self._train_X = train_X
        self._train_y = train_y
        self._valid_X = valid_X
        self._valid_y = valid_y

    @classmethod
    def stage(cls,
              source,
              device_id,
              dtype=np.float64,
              logging_=False):
        """
        Copy `source` onto device `device_id`.

        Parameters
        ----------
        source: HostData
            Immutable source data.
        device_id: int
            Device the replica is bound to.
        dtype: Union[str, np.dtype]
            Precision of the replica.
        logging_: bool
            Write info messages to log?

        Returns
        -------
        DeviceData

        Raises
        ------
        ResourceError
            If the data cannot be staged.
        """
        t0 = time.perf_counter()
        if logging_: logging.info(f'Moving data to device {device_id}')
        try:
            dtype = _check_dtype(dtype)
            order = _check_order(source.order)
            replica = cls(device_id,
                          _stage_array(source.train_X, dtype, order),
                          _stage_array(source.train_y, dtype, order),
                          _stage_array(source.valid_X, dtype, order),
                          _stage_array(source.valid_y, dtype, order),
                          order=source.order)
        except (MemoryError, ValueError, TypeError) as e:
            raise ResourceError(f'cannot stage data to device {device_id}: {e}') from e
        replica.stage_time = time.perf_counter() - t0
        if logging_: logging.info(f'Done moving data to device {device_id}. Took {replica.stage_time:g} secs')
        return replica

    # host side accessors

    def get_train_X(self):
        return self._train_X

    def get_train_y(self):
        return self._train_y

    def get_valid_X(self):
        return self._valid_X

    def get_valid_y(self):
        return self._valid_y

    @property
    def dtype(self):
        return self._train_y.dtype

    @property
    def shape(self):
        return self._train_X.shape

    def __repr__(self):
        return (f'DeviceData(device_id={self.device_id}, train={self._train_X.shape}, '
                f'valid={self._valid_X.shape}, dtype={self.dtype}, order={self.order!r})')
