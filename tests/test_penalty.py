import pytest
import numpy as np

from elnetpath.base import (ElNetPenalty,
                            SquaredErrorLoss,
                            _check_penalty_factor)
from elnetpath._utils import ConfigurationError

def test_penalty_factor_default(p=5):
    vp, exclude = _check_penalty_factor(None, p)
    assert np.allclose(vp, 1)
    assert not np.any(exclude)

@pytest.mark.parametrize('penalty_factor', [2, [3.]])
def test_penalty_factor_scalar(penalty_factor, p=4):
    vp, exclude = _check_penalty_factor(penalty_factor, p)
    assert np.allclose(vp, 1)

def test_penalty_factor_rescaled():
    vp, exclude = _check_penalty_factor([1, 2, 3], 3)
    assert np.allclose(vp.sum(), 3)
    assert np.allclose(vp, np.array([1, 2, 3]) / 2)

def test_penalty_factor_excluded():
    vp, exclude = _check_penalty_factor([1, np.inf, 1, 2], 4)
    assert list(exclude) == [False, True, False, False]
    assert np.all(np.isfinite(vp))

def test_penalty_factor_errors():
    with pytest.raises(ConfigurationError):
        _check_penalty_factor([1, 2], 3)
    with pytest.raises(ConfigurationError):
        _check_penalty_factor([np.inf, np.inf], 2)

@pytest.mark.parametrize('alpha', [0, 0.3, 1])
def test_elnet_penalty(alpha, p=6):

    rng = np.random.default_rng(0)
    vp = rng.uniform(0.5, 2, size=p)
    penalty = ElNetPenalty(alpha=alpha,
                           lambda_val=0.7,
                           penalty_factor=vp)

    assert np.allclose(penalty.l1, alpha * 0.7 * vp)
    assert np.allclose(penalty.l2, (1 - alpha) * 0.7 * vp)

    l1 = penalty.l1
    penalty.update(0.1)
    assert penalty.l1 is l1
    assert np.allclose(penalty.l1, alpha * 0.1 * vp)
    assert np.allclose(penalty.l2, (1 - alpha) * 0.1 * vp)

    coef = rng.standard_normal(p)
    expected = (alpha * 0.1 * vp * np.fabs(coef)).sum() + 0.5 * ((1 - alpha) * 0.1 * vp * coef**2).sum()
    assert np.allclose(penalty.value(coef), expected)

def test_is_uniform():
    assert ElNetPenalty(0.5, 1., np.ones(3)).is_uniform
    assert not ElNetPenalty(0.5, 1., np.array([1, 2, 1.])).is_uniform
    assert not ElNetPenalty(0.5, 1., np.ones(3), exclude=np.array([True, False, False])).is_uniform

def test_loss(n=10):
    rng = np.random.default_rng(0)
    y = rng.standard_normal(n)
    W = rng.uniform(0, 1, size=n)
    loss = SquaredErrorLoss(y, W)
    eta = rng.standard_normal(n)
    assert np.allclose(loss.value(eta), 0.5 * (W * (eta - y)**2).sum())
    assert np.allclose(SquaredErrorLoss(y).sample_weight, 1)

def test_loss_errors(n=10):
    y = np.zeros(n)
    with pytest.raises(ConfigurationError):
        SquaredErrorLoss(y, np.ones(n - 1))
    with pytest.raises(ConfigurationError):
        SquaredErrorLoss(y, -np.ones(n))
