import numpy as np


class ConfigurationError(ValueError):
    """
    Invalid run configuration or degenerate data, detected
    before any solve begins.
    """


class ResourceError(RuntimeError):
    """
    A worker could not acquire one of its resources, e.g.
    staging its data replica onto a device.
    """


class SolverError(RuntimeError):
    """
    The solver backend failed on a grid point (non-convergence
    or a numerical fault).
    """


_PRECISIONS = {'single': np.float32,
               'float': np.float32,
               'float32': np.float32,
               'double': np.float64,
               'float64': np.float64}

_ORDERS = {'r': 'C',
           'c': 'F'}


def _check_dtype(dtype):
    """
    Resolve a precision name or numpy floating type to a `np.dtype`.
    Only single and double precision are supported.
    """
    if isinstance(dtype, str):
        if dtype.lower() not in _PRECISIONS:
            raise ConfigurationError(f"unknown precision '{dtype}', use one of {sorted(_PRECISIONS)}")
        return np.dtype(_PRECISIONS[dtype.lower()])
    dtype = np.dtype(dtype)
    if dtype not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise ConfigurationError(f'dtype should be float32 or float64, got {dtype}')
    return dtype


def _check_order(order):
    """
    Map the matrix ordering flag ('r' row-major, 'c' column-major)
    to the numpy memory order.
    """
    if order not in _ORDERS:
        raise ConfigurationError(f"order should be 'r' (row-major) or 'c' (column-major), got {order!r}")
    return _ORDERS[order]


def _solver_error_message(n, maxit, alpha=None, lambda_val=None):
    if n > 0:
        msg = "Numerical fault: non-finite coefficients"
    else:
        msg = f"Convergence not reached after maxit={maxit} passes"
    if alpha is not None and lambda_val is not None:
        msg += f" at alpha={alpha:g}, lambda={lambda_val:g}"
    return f"Error code {n}: " + msg
