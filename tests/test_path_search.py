import io
import logging

import pytest
import numpy as np
import scipy.sparse

from sklearn.base import clone

from elnetpath import (ElNetPathSearch,
                       PathSearchControl,
                       SolverControl,
                       RunReporter,
                       make_dataset)
from elnetpath._utils import (ConfigurationError,
                              SolverError)

rng = np.random.default_rng(0)

def _dataset(n=100, p=5, seed=0):
    X, y = make_dataset(n_samples=n,
                        n_features=p,
                        n_informative=3,
                        snr=3,
                        random_state=seed)[:2]
    return X, y

def test_scenario(n=100, p=5):

    X, y = _dataset(n, p)
    stream = io.StringIO()
    search = ElNetPathSearch(nalpha=3,
                             nlambda=5,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-7,
                             n_workers=3,
                             n_devices=3,
                             control=PathSearchControl(stream=stream))
    search.fit(X, y)

    assert search.split_.n_train == 80
    assert search.split_.n_valid == 20
    assert search.n_workers_ == 3
    assert search.assignments_ == [[0], [1], [2]]

    df = search.summary_
    assert df.shape[0] == 15
    assert len(stream.getvalue().splitlines()) == 15
    assert set(zip(df['alpha_index'], df['lambda_index'])) == {(a, i) for a in range(3) for i in range(5)}
    assert sorted(set(df['alpha'])) == [0, 0.5, 1]
    assert np.all(df['valid_rmse'] >= 0)
    assert np.all(df['train_rmse'] >= 0)
    assert np.all((df['dof'] >= 0) & (df['dof'] <= p))
    # worker w owns alpha w
    assert np.all(df['worker_id'] == df['alpha_index'])

    for a in range(3):
        path = search.path(a)
        assert np.all(np.diff(path['lambda_val']) < 0)
        assert np.allclose(path['lambda_val'].iloc[0], 10 * search.lambda_max0_)

    assert search.solve_time_ >= 0
    assert search.wall_time_ >= search.solve_time_
    assert search.stage_times_.shape == (3,)

    # lasso column: active set only grows along the path
    lasso = search.path(2)
    assert lasso['alpha'].iloc[0] == 1
    assert np.all(np.diff(lasso['dof']) >= 0)
    assert lasso['dof'].iloc[0] == 0

def test_no_validation_rows(n=50, p=4):
    X, y = _dataset(n, p)
    search = ElNetPathSearch(nalpha=2,
                             nlambda=4,
                             valid_fraction=0,
                             lambda_min_ratio=1e-3,
                             n_workers=1).fit(X, y)
    assert search.split_.n_valid == 0
    assert np.all(search.summary_['valid_rmse'] == -1)
    assert search.summary_.shape[0] == 8

def test_monotone_dof_lasso(n=100, p=5):

    Q = np.linalg.qr(rng.standard_normal((80, p)))[0]
    train_X = 3 * Q
    train_y = train_X @ np.array([2, -1, 0.5, 0.2, 0]) + 0.1 * rng.standard_normal(80)
    train_y -= train_y.mean()
    X = np.concatenate([train_X, rng.standard_normal((20, p))], axis=0)
    y = np.concatenate([train_y, rng.standard_normal(20)])

    search = ElNetPathSearch(nalpha=2,
                             nlambda=20,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-4,
                             n_workers=1).fit(X, y)

    dof = np.asarray(search.path(1)['dof'])
    assert search.path(1)['alpha'].iloc[0] == 1
    assert dof[0] == 0
    assert np.all(np.diff(dof) >= 0)
    assert dof[-1] >= 4

def test_bad_nlambda_before_data():
    search = ElNetPathSearch(nalpha=2,
                             nlambda=1,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-3)
    # data never looked at
    with pytest.raises(ConfigurationError, match='nlambda > 1'):
        search.fit('not data', None)
    assert not hasattr(search, 'split_')

@pytest.mark.parametrize('kwargs', [dict(valid_fraction=1),
                                    dict(lambda_min_ratio=0),
                                    dict(nalpha=0),
                                    dict(order='x'),
                                    dict(dtype='half'),
                                    dict(solver='newton'),
                                    dict(n_workers=0)])
def test_bad_args(kwargs):
    params = dict(nalpha=2,
                  nlambda=3,
                  valid_fraction=0.2,
                  lambda_min_ratio=1e-3)
    params.update(kwargs)
    with pytest.raises(ConfigurationError):
        ElNetPathSearch(**params).fit('not data', None)

def test_constant_response(n=20, p=3):
    X = rng.standard_normal((n, p))
    search = ElNetPathSearch(nalpha=2, nlambda=3, valid_fraction=0.2, lambda_min_ratio=1e-3)
    with pytest.raises(ConfigurationError):
        search.fit(X, np.ones(n))

def test_deterministic(n=100, p=5):
    X, y = _dataset(n, p)
    params = dict(nalpha=4, nlambda=6, valid_fraction=0.2, lambda_min_ratio=1e-3, n_workers=2)
    df1 = ElNetPathSearch(**params).fit(X, y).summary_
    df2 = ElNetPathSearch(**params).fit(X, y).summary_
    key = ['alpha_index', 'lambda_index']
    df1 = df1.sort_values(key).reset_index(drop=True)
    df2 = df2.sort_values(key).reset_index(drop=True)
    assert list(df1['dof']) == list(df2['dof'])
    assert np.allclose(df1['train_rmse'], df2['train_rmse'])
    assert np.allclose(df1['valid_rmse'], df2['valid_rmse'])

@pytest.mark.parametrize('n_workers', [1, 3, 4])
def test_worker_count(n_workers, n=100, p=5):

    X, y = _dataset(n, p)
    params = dict(nalpha=4, nlambda=6, valid_fraction=0.2, lambda_min_ratio=1e-3, n_devices=4)
    key = ['alpha_index', 'lambda_index']

    base = ElNetPathSearch(n_workers=2, **params).fit(X, y).summary_.sort_values(key)
    if 4 % n_workers:
        with pytest.warns(UserWarning):
            search = ElNetPathSearch(n_workers=n_workers, **params).fit(X, y)
    else:
        search = ElNetPathSearch(n_workers=n_workers, **params).fit(X, y)
    other = search.summary_.sort_values(key)

    assert other.shape[0] == 24
    assert search.n_workers_ == n_workers
    assert np.allclose(base['train_rmse'], other['train_rmse'], rtol=1e-3)
    assert np.allclose(base['valid_rmse'], other['valid_rmse'], rtol=1e-3)

def test_more_workers_than_alphas(n=60, p=4):
    X, y = _dataset(n, p)
    with pytest.warns(UserWarning):
        search = ElNetPathSearch(nalpha=2,
                                 nlambda=3,
                                 valid_fraction=0.2,
                                 lambda_min_ratio=1e-3,
                                 n_workers=4,
                                 n_devices=4).fit(X, y)
    assert search.summary_.shape[0] == 6
    assert search.assignments_ == [[0], [1], [], []]
    assert np.all(search.stage_times_[2:] == 0)

def test_single_alpha(n=60, p=4):
    X, y = _dataset(n, p)
    search = ElNetPathSearch(nalpha=1,
                             nlambda=3,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-3).fit(X, y)
    assert np.all(search.summary_['alpha'] == 0.5)

@pytest.mark.parametrize('order', ['r', 'c'])
def test_flat_input(order, n=60, p=4):
    X, y = _dataset(n, p)
    params = dict(nalpha=2, nlambda=3, valid_fraction=0.2, lambda_min_ratio=1e-3, n_workers=1)
    df = ElNetPathSearch(**params).fit(X, y).summary_
    flat = X.reshape(-1, order={'r':'C', 'c':'F'}[order])
    df_flat = ElNetPathSearch(order=order, **params).fit(flat, y).summary_
    assert np.allclose(df['train_rmse'], df_flat['train_rmse'])

def test_single_precision(n=100, p=5):
    X, y = _dataset(n, p)
    params = dict(nalpha=2, nlambda=4, valid_fraction=0.2, lambda_min_ratio=1e-3, n_workers=1)
    search = ElNetPathSearch(dtype='single', **params).fit(X, y)
    assert search.grid_.lambda_values.dtype == np.float32
    assert search.split_.train_X.dtype == np.float32
    assert search.split_.train_y.dtype == np.float32
    assert search.split_.valid_y.dtype == np.float32
    df64 = ElNetPathSearch(**params).fit(X, y).summary_
    assert np.allclose(search.summary_['train_rmse'], df64['train_rmse'], rtol=1e-3)

def test_sparse_input(n=100, p=5):
    X, y = _dataset(n, p)
    X[np.fabs(X) < 0.5] = 0
    params = dict(nalpha=2, nlambda=4, valid_fraction=0.2, lambda_min_ratio=1e-3, n_workers=1)
    df = ElNetPathSearch(**params).fit(X, y).summary_
    df_s = ElNetPathSearch(**params).fit(scipy.sparse.csc_array(X), y).summary_
    assert np.allclose(df['train_rmse'], df_s['train_rmse'], rtol=1e-4)
    assert np.allclose(df['valid_rmse'], df_s['valid_rmse'], rtol=1e-4)

def test_sklearn_solver(n=100, p=5):
    X, y = _dataset(n, p)
    params = dict(nalpha=2, nlambda=4, valid_fraction=0.2, lambda_min_ratio=1e-2, n_workers=1)
    df = ElNetPathSearch(solver_control=SolverControl(thresh=1e-12), **params).fit(X, y).summary_
    df_sk = ElNetPathSearch(solver='sklearn',
                            solver_control=SolverControl(thresh=1e-10),
                            **params).fit(X, y).summary_
    assert np.allclose(df['train_rmse'], df_sk['train_rmse'], rtol=1e-3)

def test_standardize_response(n=100, p=5):

    X, y = _dataset(n, p)
    y = 10 + 4 * y
    search = ElNetPathSearch(nalpha=2,
                             nlambda=5,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-3,
                             standardize_response=True,
                             n_workers=1).fit(X, y)

    # at the largest lambda the lasso is empty, predicting the training mean
    first = search.path(1).iloc[0]
    mean = y[:80].mean()
    assert first['dof'] == 0
    assert np.allclose(first['train_rmse'], y[:80].std())
    assert np.allclose(first['valid_rmse'], np.sqrt(np.mean((y[80:] - mean)**2)))

def test_sample_weight(n=60, p=4):
    X, y = _dataset(n, p)
    params = dict(nalpha=2, nlambda=3, valid_fraction=0.2, lambda_min_ratio=1e-3, n_workers=1)
    df = ElNetPathSearch(**params).fit(X, y).summary_
    df_w = ElNetPathSearch(**params).fit(X, y, sample_weight=np.ones(n)).summary_
    assert np.allclose(df['train_rmse'], df_w['train_rmse'])
    with pytest.raises(ConfigurationError):
        ElNetPathSearch(**params).fit(X, y, sample_weight=np.ones(n - 1))

def test_penalty_factor(n=100, p=5):
    X, y = _dataset(n, p)
    search = ElNetPathSearch(nalpha=2,
                             nlambda=5,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-3,
                             penalty_factor=[np.inf, np.inf, 1, 1, 1],
                             n_workers=1).fit(X, y)
    assert search.summary_['dof'].max() <= 3

def test_solver_failure_keeps_records(n=100, p=5):

    X, y = _dataset(n, p)
    y = y - y.mean()
    search = ElNetPathSearch(nalpha=1,
                             nlambda=5,
                             valid_fraction=0.2,
                             lambda_min_ratio=1e-3,
                             n_workers=1,
                             solver_control=SolverControl(maxit=1))
    with pytest.raises(SolverError):
        search.fit(X, y)
    assert 1 <= len(search.reporter_) < 5

def test_external_reporter(n=60, p=4):
    X, y = _dataset(n, p)
    reporter = RunReporter()
    search = ElNetPathSearch(nalpha=2, nlambda=3, valid_fraction=0.2, lambda_min_ratio=1e-3)
    search.fit(X, y, reporter=reporter)
    assert len(reporter) == 6
    assert search.reporter_ is reporter

def test_logging(caplog, n=60, p=4):
    X, y = _dataset(n, p)
    caplog.set_level(logging.INFO)
    ElNetPathSearch(nalpha=2,
                    nlambda=3,
                    valid_fraction=0.2,
                    lambda_min_ratio=1e-3,
                    n_workers=1,
                    control=PathSearchControl(logging=True, progress=True)).fit(X, y)
    assert 'lambda_max0' in caplog.text
    assert 'Rows in training data: 48' in caplog.text
    assert 'END SOLVE' in caplog.text

def test_clone():
    search = ElNetPathSearch(nalpha=2, nlambda=3, valid_fraction=0.2, lambda_min_ratio=1e-3, dtype='single')
    params = clone(search).get_params()
    assert params['nalpha'] == 2
    assert params['dtype'] == 'single'

@pytest.mark.parametrize('metric', ['train_rmse', 'valid_rmse', 'dof'])
def test_plot_path(metric, n=60, p=4):
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    X, y = _dataset(n, p)
    search = ElNetPathSearch(nalpha=3, nlambda=4, valid_fraction=0.2, lambda_min_ratio=1e-3).fit(X, y)
    ax = search.plot_path(metric)
    assert len(ax.get_lines()) == 3
    plt.close('all')

    with pytest.raises(ValueError):
        search.plot_path('aic')
