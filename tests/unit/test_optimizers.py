import numpy as np
import pytest

from nnscope.core import initializers
from nnscope.core.errors import ConfigurationError
from nnscope.core.params import ParameterStore
from nnscope.core.types import Gradients
from nnscope.training import Network
from nnscope.training.optimizers import Adam, Momentum, OptimizerKind, make_optimizer

LR = 0.1


def _store():
    store = ParameterStore((2, 3, 1))
    store.build(initializers.get("ones"), np.random.default_rng(0))
    return store


def _grads(store, value=0.5):
    return Gradients(
        weights=[np.full_like(W, value) for W in store.weights],
        biases=[np.full_like(b, value) for b in store.biases],
    )


@pytest.mark.parametrize(
    "name,expected_delta",
    [
        ("sgd", LR * 0.5),
        ("momentum", LR * 0.5),
        ("adagrad", LR),
        ("rmsprop", LR / np.sqrt(0.1)),
        ("adam", LR),
        ("nadam", LR * 1.9),
    ],
)
def test_first_step_size(name, expected_delta):
    store = _store()
    optimizer = make_optimizer(name, LR, store)
    optimizer.step(store, _grads(store))
    for W in store.weights:
        np.testing.assert_allclose(W, 1.0 - expected_delta, rtol=1e-6)
    for b in store.biases:
        np.testing.assert_allclose(b, -expected_delta, rtol=1e-6)


def test_momentum_accumulates_velocity():
    store = _store()
    optimizer = make_optimizer("momentum", LR, store)
    grads = _grads(store)
    optimizer.step(store, grads)
    optimizer.step(store, grads)
    # v1 = g, v2 = 0.9 g + g
    np.testing.assert_allclose(store.weights[0], 1.0 - LR * 0.5 - LR * 0.95)


def test_state_is_sized_per_tensor():
    store = _store()
    adam = make_optimizer("adam", LR, store)
    assert isinstance(adam, Adam)
    assert [m.shape for m in adam.m] == [t.shape for t in store.tensors()]
    assert adam.t == 0


@pytest.mark.parametrize("lr", [0.0, -1.0, float("nan"), float("inf"), "fast"])
def test_invalid_learning_rate(lr):
    with pytest.raises(ConfigurationError):
        make_optimizer("sgd", lr, _store())


def test_switching_optimizer_starts_from_fresh_state():
    net = Network([1, 3, 1], "tanh", "momentum", 0.05, seed=0)
    net.train_epoch([[0.5], [-0.5]], [[1.0], [0.0]])
    assert isinstance(net.optimizer, Momentum)
    assert any(np.any(v != 0.0) for v in net.optimizer.velocity)

    net.set_optimizer("adam")
    assert net.optimizer.kind is OptimizerKind.ADAM
    assert net.optimizer.t == 0
    assert net.learning_rate == pytest.approx(0.05)

    net.set_optimizer("momentum", 0.01)
    assert all(np.all(v == 0.0) for v in net.optimizer.velocity)
    assert net.learning_rate == pytest.approx(0.01)


def test_rejected_switch_keeps_previous_optimizer():
    net = Network([1, 2, 1], optimizer="rmsprop", learning_rate=0.01, seed=0)
    previous = net.optimizer
    with pytest.raises(ConfigurationError):
        net.set_optimizer("lbfgs")
    with pytest.raises(ConfigurationError):
        net.set_optimizer("sgd", 0.0)
    assert net.optimizer is previous
