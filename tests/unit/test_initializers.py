import numpy as np
import pytest

from nnscope.core import initializers
from nnscope.core.errors import ConfigurationError
from nnscope.core.initializers import InitKind
from nnscope.core.params import ParameterStore


def _build(kind, dims=(3, 5, 2), seed=0):
    store = ParameterStore(dims)
    store.build(initializers.get(kind), np.random.default_rng(seed))
    return store


@pytest.mark.parametrize("kind", list(InitKind))
def test_shapes_and_zero_biases(kind):
    store = _build(kind)
    assert [W.shape for W in store.weights] == [(5, 3), (2, 5)]
    assert all(np.all(b == 0.0) for b in store.biases)


def test_xavier_respects_bound():
    store = _build("glorot", dims=(4, 6))
    bound = np.sqrt(6.0 / 10.0)
    assert np.all(np.abs(store.weights[0]) <= bound)


def test_constant_schemes():
    assert np.all(_build("zeros").weights[0] == 0.0)
    assert np.all(_build("ones").weights[1] == 1.0)


def test_same_seed_same_weights():
    a = _build("he", seed=7)
    b = _build("kaiming", seed=7)
    for wa, wb in zip(a.weights, b.weights):
        np.testing.assert_array_equal(wa, wb)


def test_unknown_initializer():
    with pytest.raises(ConfigurationError):
        initializers.get("orthogonal")
