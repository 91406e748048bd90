import numpy as np
import pytest

from nnscope.core import activations
from nnscope.core.backprop import backward
from nnscope.core.forward import forward
from nnscope.training import Network, losses

EPS = 1e-6


def _numeric_gradients(net, loss, xs, ts):
    """Central differences of the summed per-sample loss."""

    def total():
        return sum(loss(net.predict(x), t)[0] for x, t in zip(xs, ts))

    numeric = []
    for tensor in net.params.tensors():
        grad = np.zeros_like(tensor)
        for idx in np.ndindex(tensor.shape):
            original = tensor[idx]
            tensor[idx] = original + EPS
            upper = total()
            tensor[idx] = original - EPS
            lower = total()
            tensor[idx] = original
            grad[idx] = (upper - lower) / (2 * EPS)
        numeric.append(grad)
    return numeric


@pytest.mark.parametrize(
    "arch,activation,loss",
    [
        ([1, 3, 1], "tanh", "mse"),
        ([2, 4, 3], "sigmoid", "mse"),
        ([3, 5, 4, 2], "gelu", "log_cosh"),
        ([1, 6, 1], "softplus", "mse"),
    ],
)
def test_summed_batch_gradients_match_finite_differences(arch, activation, loss):
    net = Network(arch, activation, "sgd", 0.01, loss=loss, seed=5)
    rng = np.random.default_rng(1)
    xs = rng.uniform(-1, 1, size=(4, arch[0]))
    ts = rng.uniform(-1, 1, size=(4, arch[-1]))
    numeric = _numeric_gradients(net, losses.get(loss), xs, ts)

    net.train_epoch(xs, ts)
    analytic = _interleave(net.weight_gradients, net.bias_gradients)
    for got, want in zip(analytic, numeric):
        np.testing.assert_allclose(got, want, atol=1e-4, rtol=1e-4)


def _interleave(weights, biases):
    out = []
    for W, b in zip(weights, biases):
        out.extend((W, b))
    return out


def test_dropped_units_receive_no_gradient():
    net = Network([2, 40, 1], "tanh", seed=0, dropout_rate=0.5)
    act = activations.get("tanh")
    _, cache = forward(
        net.params, [0.4, -0.2], act, training=True, dropout_rate=0.5, rng=np.random.default_rng(3)
    )
    grads = backward(net.params, cache, [1.0], act, losses.get("mse"))
    dropped = cache.masks[0] == 0.0
    assert dropped.any() and (~dropped).any()
    assert np.all(grads.weights[1][:, dropped] == 0.0)
    assert np.all(grads.weights[0][dropped, :] == 0.0)
    assert np.all(grads.biases[0][dropped] == 0.0)
    assert np.any(grads.biases[0][~dropped] != 0.0)


def test_seeded_dropout_is_reproducible():
    net = Network([1, 16, 1], "relu", seed=0, dropout_rate=0.3)
    act = activations.get("relu")
    first = forward(net.params, 0.5, act, training=True, dropout_rate=0.3, rng=np.random.default_rng(9))
    second = forward(net.params, 0.5, act, training=True, dropout_rate=0.3, rng=np.random.default_rng(9))
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1].masks[0], second[1].masks[0])
