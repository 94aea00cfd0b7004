import logging
import threading

from dataclasses import dataclass, asdict, fields

import pandas as pd
from tqdm import tqdm


@dataclass(frozen=True)
class PathRecord(object):
    """
    Result of one grid point.

    Parameters
    ----------
    worker_id: int
        Worker that solved the point.
    alpha_index: int
        Index of `alpha` in the grid.
    alpha: float
        The elasticnet mixing parameter.
    lambda_index: int
        Index of `lambda_val` in the lambda sequence of `alpha`.
    lambda_val: float
        Value of the `lambda` hyperparameter.
    dof: int
        The number of coefficients with magnitude above 1e-8.
    train_rmse: float
        Root mean squared error on the training rows.
    valid_rmse: float
        Root mean squared error on the validation rows, -1 if there
        are none.
    """
    worker_id: int
    alpha_index: int
    alpha: float
    lambda_index: int
    lambda_val: float
    dof: int
    train_rmse: float
    valid_rmse: float

    def format(self):
        return ('me: %d a: %d alpha: %g i: %d lambda: %g dof: %d trainRMSE: %f validRMSE: %f' %
                (self.worker_id,
                 self.alpha_index,
                 self.alpha,
                 self.lambda_index,
                 self.lambda_val,
                 self.dof,
                 self.train_rmse,
                 self.valid_rmse))

RECORD_COLUMNS = [f.name for f in fields(PathRecord)]


class RunReporter(object):
    """
    Sink for the records of a run.

    Records are kept in arrival order; `emit` may be called from
    several workers at once and writes one record at a time.

    Parameters
    ----------
    stream: Optional[TextIO]
        If not None, each record is written to it as one line.
    progress: bool
        Show a `tqdm` progress bar?
    total: Optional[int]
        Expected number of records, for the progress bar.
    logging_: bool
        Write each record to the log?
    """

    def __init__(self,
                 stream=None,
                 progress=False,
                 total=None,
                 logging_=False):
        self.stream = stream
        self.logging_ = logging_
        self._records = []
        self._lock = threading.Lock()
        if progress:
            self.pb = tqdm(total=total, desc='grid points')
        else:
            self.pb = None

    def emit(self, record):
        with self._lock:
            self._records.append(record)
            if self.stream is not None:
                self.stream.write(record.format() + '\n')
                self.stream.flush()
            if self.logging_: logging.info(record.format())
            if self.pb is not None:
                self.pb.update(1)

    @property
    def records(self):
        with self._lock:
            return list(self._records)

    def __len__(self):
        with self._lock:
            return len(self._records)

    def close(self):
        if self.pb is not None:
            self.pb.close()
            self.pb = None

    def to_frame(self):
        return pd.DataFrame([asdict(r) for r in self.records],
                            columns=RECORD_COLUMNS)
