import numpy as np
import pytest

from nnscope.core.errors import ConfigurationError
from nnscope.training import losses
from nnscope.training.losses import LossKind


def test_mse_value_and_exact_gradient():
    pred = np.array([1.0, 3.0])
    target = np.array([0.0, 1.0])
    value, grad = losses.get("mse")(pred, target)
    assert value == pytest.approx(2.5)
    assert np.allclose(grad, [1.0, 2.0])


def test_huber_switches_to_linear_beyond_delta():
    value, grad = losses.get("huber")(np.array([3.0]), np.array([0.0]))
    assert value == pytest.approx(2.5)
    assert np.allclose(grad, [1.0])
    value, grad = losses.get("huber")(np.array([0.5]), np.array([0.0]))
    assert value == pytest.approx(0.125)
    assert np.allclose(grad, [0.5])


def test_log_cosh_is_finite_for_large_errors():
    value, grad = losses.get("log_cosh")(np.array([1000.0]), np.array([0.0]))
    assert np.isfinite(value)
    assert value == pytest.approx(1000.0 - np.log(2.0))
    assert np.allclose(grad, [1.0])


@pytest.mark.parametrize("kind", [LossKind.MSE, LossKind.HUBER, LossKind.LOG_COSH, LossKind.MAE])
def test_gradient_matches_finite_difference(kind):
    loss = losses.get(kind)
    pred = np.array([0.3, -1.7, 2.4])
    target = np.array([0.1, 0.2, 0.0])
    _, grad = loss(pred, target)
    eps = 1e-6
    numeric = np.zeros_like(pred)
    for i in range(pred.size):
        step = np.zeros_like(pred)
        step[i] = eps
        numeric[i] = (loss(pred + step, target)[0] - loss(pred - step, target)[0]) / (2 * eps)
    assert np.allclose(grad, numeric, atol=1e-6)


def test_loss_aliases_and_unknown_name():
    assert losses.get("mean_squared_error").kind is LossKind.MSE
    assert losses.get("LogCosh").kind is LossKind.LOG_COSH
    with pytest.raises(ConfigurationError):
        losses.get("cross_entropy")
