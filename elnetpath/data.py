"""
elnetpath.data
--------------
Synthetic regression data for path searches.

Similar to sklearn's make_regression, with signal-to-noise ratio (SNR)
control and the precision of the run.
"""

import numpy as np
from numpy.random import default_rng

from ._utils import _check_dtype


def make_dataset(n_samples=100,
                 n_features=20,
                 n_informative=10,
                 noise=1.0,
                 snr=None,
                 coef=None,
                 random_state=None,
                 bias=0.,
                 dtype='double',
                 uniform=False):
    """
    Generate a random linear regression problem.

    Parameters
    ----------
    n_samples : int, default=100
        The number of samples.
    n_features : int, default=20
        The total number of features.
    n_informative : int, default=10
        The number of informative features.
    noise : float, default=1.0
        Standard deviation of the Gaussian noise added to the output.
    snr : float or None, default=None
        Desired signal-to-noise ratio. If set, noise will be scaled to achieve this SNR.
    coef : array-like, default=None
        The coefficients to use. If None, random coefficients are generated.
    random_state : int, Generator or None, default=None
        Determines random number generation for dataset creation.
    bias : float or None, default=0.
        The bias (intercept) term in the underlying linear model. If None,
        a random value is generated.
    dtype : str or np.dtype, default='double'
        Precision of `X` and `y`.
    uniform : bool, default=False
        Draw features and coefficients uniformly from [0,1) rather
        than from a standard normal.

    Returns
    -------
    X : ndarray of shape (n_samples, n_features)
        The input samples.
    y : ndarray of shape (n_samples,)
        The output targets.
    coef : ndarray of shape (n_features,)
        The underlying true coefficients used to generate the data.
    intercept : float
        The intercept (bias) used in the data generation.

    Examples
    --------
    >>> X, y, coef, intercept = make_dataset(n_samples=100, n_features=10, snr=5)
    >>> X.shape, y.shape, coef.shape
    ((100, 10), (100,), (10,))
    """
    dtype = _check_dtype(dtype)
    rng = default_rng(random_state)

    if uniform:
        X = rng.uniform(size=(n_samples, n_features))
    else:
        X = rng.standard_normal((n_samples, n_features))

    n_informative = min(n_informative, n_features)

    if coef is None:
        coef = np.zeros(n_features)
        if uniform:
            coef[:n_informative] = rng.uniform(size=n_informative)
        else:
            coef[:n_informative] = rng.normal(0, 1, size=n_informative)
        rng.shuffle(coef)
    else:
        coef = np.asarray(coef, float).reshape(-1)
        if coef.shape[0] != n_features:
            raise ValueError(f'coef should have shape ({n_features},), got {coef.shape}')

    if bias is None:
        intercept = rng.normal(0, 1)
    else:
        intercept = bias

    lin_pred = X @ coef + intercept
    if snr is not None:
        signal_var = np.var(lin_pred)
        noise = np.sqrt(signal_var / snr)
    y = lin_pred + rng.normal(0, noise, size=n_samples)

    return X.astype(dtype), y.astype(dtype), coef, intercept
