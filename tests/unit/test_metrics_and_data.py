import numpy as np
import pytest

from nnscope.data import functions, make_dataset, names
from nnscope.training.metrics import compute_metrics, confusion_counts, r2_score


def test_perfect_fit_metrics():
    targets = np.linspace(-1, 1, 9).reshape(-1, 1)
    metrics = compute_metrics(targets.copy(), targets)
    assert metrics["mse"] == 0.0
    assert metrics["mae"] == 0.0
    assert metrics["r2"] == pytest.approx(1.0)
    assert metrics["accuracy"] == pytest.approx(1.0)
    assert metrics["fp"] == metrics["fn"] == 0


def test_confusion_counts_classify_by_midpoint():
    counts = confusion_counts([1.0, 0.0], [0.0, 1.0], threshold=0.1)
    assert (counts.tp, counts.fp, counts.tn, counts.fn) == (0, 1, 0, 1)

    # wrong magnitude on the correct side still agrees
    counts = confusion_counts([0.7, 0.2], [1.0, 0.0], threshold=0.1)
    assert (counts.tp, counts.fp, counts.tn, counts.fn) == (1, 0, 1, 0)


def test_r2_of_mean_prediction_is_zero():
    targets = np.array([1.0, 2.0, 3.0])
    assert r2_score(np.full(3, 2.0), targets) == pytest.approx(0.0)


def test_metrics_use_first_output_column():
    preds = np.array([[0.0, 5.0], [1.0, 5.0]])
    targs = np.array([[0.0, 0.0], [1.0, 0.0]])
    assert compute_metrics(preds, targs)["mse"] == 0.0


def test_make_dataset_single_and_multi_output():
    single = make_dataset("sine", 30)
    assert single.inputs.shape == (30, 1)
    assert single.targets.shape == (30, 1)
    assert single.inputs[0, 0] == -1.0 and single.inputs[-1, 0] == 1.0

    multi = make_dataset(["sine", "cosine"], 11)
    assert multi.targets.shape == (11, 2)
    assert multi.provenance == {"name": "sine+cosine", "n_points": 11}


def test_target_functions_are_bounded():
    x = np.linspace(-1, 1, 101)
    assert len(names()) == 26
    for name in names():
        y = functions.get(name)(x)
        assert y.shape == x.shape
        assert np.all(np.abs(y) <= 2.0), name


def test_unknown_target_and_bad_point_count():
    with pytest.raises(KeyError):
        make_dataset("sawtooth")
    with pytest.raises(ValueError):
        make_dataset("sine", 0)
