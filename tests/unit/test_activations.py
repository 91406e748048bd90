import numpy as np
import pytest

from nnscope.core import activations
from nnscope.core.activations import ActivationKind
from nnscope.core.errors import ConfigurationError

# away from the kinks of relu-like functions
POINTS = np.array([-2.3, -0.9, -0.35, 0.2, 0.75, 1.6, 3.1])


@pytest.mark.parametrize("kind", list(ActivationKind))
def test_derivative_matches_finite_difference(kind):
    act = activations.get(kind)
    eps = 1e-6
    numeric = (act(POINTS + eps) - act(POINTS - eps)) / (2 * eps)
    assert np.allclose(act.deriv(POINTS), numeric, atol=1e-5)


def test_every_kind_is_registered():
    assert activations.REGISTRY.names() == [kind.value for kind in ActivationKind]
    assert len(activations.REGISTRY.names()) == 14


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Tanh", ActivationKind.TANH),
        ("leaky-relu", ActivationKind.LEAKY_RELU),
        ("identity", ActivationKind.LINEAR),
        ("silu", ActivationKind.SWISH),
    ],
)
def test_names_resolve_case_insensitively_and_via_aliases(name, expected):
    assert activations.get(name).kind is expected


def test_unknown_activation_lists_choices():
    with pytest.raises(ConfigurationError) as excinfo:
        activations.get("sine")
    assert "relu" in str(excinfo.value)


def test_sigmoid_is_stable_for_large_inputs():
    x = np.array([-1000.0, 0.0, 1000.0])
    with np.errstate(over="raise"):
        out = activations.sigmoid(x)
    assert np.allclose(out, [0.0, 0.5, 1.0])


def test_slopes_and_constants():
    x = np.array([-2.0, 2.0])
    assert np.allclose(activations.get("leaky_relu")(x), [-0.02, 2.0])
    assert np.allclose(activations.get("prelu")(x), [-0.5, 2.0])
    assert np.allclose(activations.get("selu")(np.array([1.0])), [activations.SELU_SCALE])
    assert np.allclose(activations.get("linear")(x), x)
