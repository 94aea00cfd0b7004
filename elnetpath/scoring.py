from typing import NamedTuple
from dataclasses import dataclass

import numpy as np

from sklearn.metrics import mean_squared_error

# |coef| above this counts as active
DOF_THRESHOLD = 1e-8

# reported in place of the validation RMSE when there are no validation rows
NO_VALIDATION = -1


@dataclass(frozen=True)
class Scorer(object):

    name: str
    score: callable=None
    maximize: bool=True

    def score_fn(self,
                 response,
                 predictions,
                 dtype=np.float64):
        # accumulate in double, report in the run precision
        value = self.score(np.asarray(response, np.float64),
                           np.asarray(predictions, np.float64))
        return np.dtype(dtype).type(value)


def _rmse(y, yhat):
    return np.sqrt(mean_squared_error(y, yhat))

rmse_scorer = Scorer(name='Root Mean Squared Error',
                     score=_rmse,
                     maximize=False)


class PointScore(NamedTuple):

    dof: int
    train_rmse: float
    valid_rmse: float


def degrees_of_freedom(coef):
    """
    Number of coefficients with magnitude above 1e-8.
    """
    return int((np.fabs(np.asarray(coef)) > DOF_THRESHOLD).sum())


def predict(X, coef):
    return np.asarray(X @ coef).reshape(-1)


def rmse(response, predictions, dtype=np.float64):
    """
    Root mean squared error, or `NO_VALIDATION` for an empty response.
    """
    if np.asarray(response).shape[0] == 0:
        return np.dtype(dtype).type(NO_VALIDATION)
    return rmse_scorer.score_fn(response, predictions, dtype=dtype)


def score_coefficients(coef,
                       data,
                       split=None):
    """
    Active-variable count and train / validation RMSE of `coef`.

    Parameters
    ----------
    coef: np.ndarray
        Coefficients, shape `(nvars,)`.
    data: DeviceData
        A data replica; predictions are computed on the host arrays.
    split: Optional[TrainValidSplit]
        If the response was standardized, predictions and responses
        are mapped back to the original scale before scoring.

    Returns
    -------
    PointScore
    """
    dtype = data.dtype
    coef = np.asarray(coef, dtype)

    def _score(X, y):
        if y.shape[0] == 0:
            return dtype.type(NO_VALIDATION)
        pred = predict(X, coef)
        if split is not None:
            pred, y = split.unstandardize(pred), split.unstandardize(y)
        return rmse(y, pred, dtype=dtype)

    return PointScore(dof=degrees_of_freedom(coef),
                      train_rmse=_score(data.get_train_X(), data.get_train_y()),
                      valid_rmse=_score(data.get_valid_X(), data.get_valid_y()))
