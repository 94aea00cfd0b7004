from .base import (ElNetPenalty,
                   SquaredErrorLoss)
from .split import (TrainValidSplit,
                    train_valid_split)
from .grid import (PathGrid,
                   lambda_max0,
                   make_path_grid)
from .device import (HostData,
                     DeviceData)
from .solver import (SolverControl,
                     CoordinateDescentSolver,
                     SklearnElasticNetSolver)
from .reporter import (PathRecord,
                       RunReporter)
from .path_search import (ElNetPathSearch,
                          PathSearchControl)
from .data import make_dataset
from ._utils import (ConfigurationError,
                     ResourceError,
                     SolverError)

from .info import __version__
