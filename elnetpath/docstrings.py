from dataclasses import fields

_docstrings = {
    'X':'''
X: Union[np.ndarray, scipy.sparse.csc_array]
    Input matrix, of shape `(nobs, nvars)`; each row is an observation
    vector. A flat buffer of length `nobs*nvars` is reshaped using
    `order`.''',

    'y':'''
y: np.ndarray
    Response variable.''',

    'sample_weight':'''
sample_weight: Optional[np.ndarray]
    Weights of the squared-error loss terms of the training rows.
    Default is 1 for every row.''',

    'nalpha':'''
nalpha: int
    Number of values of the mixing parameter `alpha`, equally spaced
    on [0,1]. A single value is placed at 0.5.''',

    'nlambda':'''
nlambda: int
    Number of `lambda` values per `alpha`. Values are equally spaced
    on a log-scale from lambda_max to lambda_max * lambda_min_ratio.
    Must be at least 2.''',

    'valid_fraction':'''
valid_fraction: float
    Fraction of rows, taken from the tail of the data, held out for
    validation. Must be in [0,1).''',

    'lambda_min_ratio':'''
lambda_min_ratio: float
    Ratio of smallest lambda to lambda_max. Must be in (0,1).''',

    'alpha':r'''
alpha: float
    The elasticnet mixing parameter in [0,1].  The penalty is
    defined as $(1-\alpha)/2||\beta||_2^2+\alpha||\beta||_1.$
    `alpha=1` is the lasso penalty, and `alpha=0` the ridge
    penalty.''',

    'lambda_val':'''
lambda_val: float
    A single value for the `lambda` hyperparameter.''',

    'penalty_factor':'''
penalty_factor: Optional[np.ndarray]
    Separate penalty factors can be applied to each
    coefficient. This is a number that multiplies `lambda_val` to
    allow differential shrinkage. Can be 0 for some variables,
    which implies no shrinkage, and `np.inf`, which excludes the
    variable from the model. Default is 1 for all variables. Note:
    the penalty factors are internally rescaled to sum to
    `nvars=X.shape[1]`.''',

    'n_workers':'''
n_workers: Optional[int]
    Requested number of parallel workers. The number used is the
    smaller of this and the number of available devices.''',

    'n_devices':'''
n_devices: Optional[int]
    Number of available devices. Defaults to the number of CPUs
    reported by `joblib`.''',

    'order':'''
order: str
    Memory ordering of the staged matrices: 'r' for row-major, 'c'
    for column-major.''',

    'dtype':'''
dtype: Union[str, np.dtype]
    Floating point precision of the whole run, "single" or "double".''',

    'standardize_response':'''
standardize_response: bool
    Center and scale the response by its training mean and standard
    deviation before solving? Default is False, in which case the
    statistics are computed for reporting only.''',

    'solver':'''
solver: Union[str, type]
    Solver backend: "cd" (coordinate descent), "sklearn"
    (`sklearn.linear_model.ElasticNet`) or a `Solver` subclass.''',

    'thresh':'''
thresh: float
    Convergence threshold for coordinate descent. Each
    coordinate-descent loop continues until the maximum change in the
    objective after any coefficient update is less than thresh times
    the weighted sum of squares of the response.  Default value is `1e-7`.''',

    'maxit':'''
maxit: int
    Maximum number of passes over the data; default is
    `10^5`.''',

    'warm_start':'''
warm_start: bool
    Start each solve from the coefficients of the previous solve
    on the same data replica?''',

    'covariance':'''
covariance: Optional[bool]
    Use covariance updates (factorize `X'WX` once per replica)
    rather than residual updates? Default chooses covariance
    updates when there are fewer than 500 variables.''',

    'logging':'''
logging: bool
    Write info and debug messages to log?''',

    'progress':'''
progress: bool
    Show a `tqdm` progress bar over the grid points?''',

    'stream':'''
stream: Optional[TextIO]
    If not None, one line per grid point is written to this stream.''',

    'control_solver': '''
solver_control: SolverControl
    Parameters to control the solver.''',

    'control_path_search': '''
control: Optional(PathSearchControl)
    Parameters to control the run.''',

    'dof':'''
dof: int
    The number of coefficients with magnitude above 1e-8.''',
}


def make_docstring(*fieldnames):

    field_str = '\n\n'.join([_docstrings[f].strip() for f in fieldnames])
    return f'''
Parameters
----------

{field_str}
'''

def add_dataclass_docstring(kls, subs={}):
    """
    Add a docstring to a dataclass using entries in `._docstrings` based on the fields
    of the dataclass.
    """

    fieldnames = [f.name for f in fields(kls)]
    for k in subs:
        fieldnames[fieldnames.index(k)] = subs[k]

    kls.__doc__ = '\n'.join([kls.__doc__ or '', make_docstring(*fieldnames)])
    return kls
