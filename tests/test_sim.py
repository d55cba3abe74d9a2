"""
Tests for the experiment harness: data, baseline, evaluation, io and plots.
"""
import json
import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pytest

from dknn.classifier import DilutedKNNClassifier
from dknn.points import DataPoint
from sim.baseline import NearestMeanClassifier
from sim.config import SimConfig
from sim.data import (
    generate_labeled_points,
    load_points_csv,
    make_training_batches,
    points_to_arrays,
    save_points_csv,
)
from sim.evaluate import classification_metrics, train_dknn
from sim.io_utils import load_state_json, save_rows_csv, save_state_json, save_training_history_csv
from sim.main import run_experiment
from sim.plots import confidence_map, plot_compare_accuracy, plot_confidence_map, plot_parameter_history


MEANS = [(0.0, 0.0), (40.0, 0.0)]
STDS = [2.0, 2.0]


def _small_config():
    cfg = SimConfig()
    cfg.train.n_batches = 10
    cfg.train.batch_size = 10
    cfg.test.n_points = 60
    return cfg


def test_generate_labeled_points():
    """Test labels are in range and the generator is seed-deterministic."""
    a = generate_labeled_points(50, MEANS, STDS, rng=np.random.RandomState(0))
    b = generate_labeled_points(50, MEANS, STDS, rng=np.random.RandomState(0))
    assert a == b
    assert {p.label for p in a} <= {0, 1}


def test_generate_labeled_points_rejects_mismatch():
    """Test means and stds must align."""
    with pytest.raises(ValueError):
        generate_labeled_points(5, MEANS, [1.0])


def test_make_training_batches_missing_entries():
    """Test missing_rate=1 blanks every entry; 0 keeps all of them."""
    points = generate_labeled_points(20, MEANS, STDS, rng=np.random.RandomState(0))
    full = make_training_batches(points, 10, missing_rate=0.0)
    empty = make_training_batches(points, 10, missing_rate=1.0, rng=np.random.RandomState(0))
    assert all(p is not None for b in full for p in b)
    assert all(p is None for b in empty for p in b)


def test_points_csv_round_trip(tmp_path):
    """Test points survive a CSV save/load."""
    points = [DataPoint(1.5, -2.0, 1), DataPoint(0.25, 3.0)]
    path = str(tmp_path / "points.csv")
    save_points_csv(points, path)
    assert load_points_csv(path) == points


def test_nearest_mean_classifier():
    """Test the baseline on two separated blobs."""
    points = generate_labeled_points(100, MEANS, STDS, rng=np.random.RandomState(2))
    X, y = points_to_arrays(points)
    clf = NearestMeanClassifier(class_count=2).fit(X, y)
    assert np.mean(clf.predict(X) == y) > 0.95


def test_nearest_mean_classifier_errors():
    """Test unfitted use and missing classes."""
    with pytest.raises(RuntimeError):
        NearestMeanClassifier(class_count=2).predict_one(np.zeros(2))
    with pytest.raises(ValueError, match="class 1"):
        NearestMeanClassifier(class_count=2).fit(np.zeros((3, 2)), np.zeros(3, dtype=int))


def test_nearest_mean_classifier_standardize_rescales_features():
    """Test z-scoring lets a narrow feature outweigh a wide noisy one."""
    rng = np.random.RandomState(4)
    y = np.repeat([0, 1], 50)
    # class signal lives in the small-unit feature, the other is wide noise
    X = np.column_stack([rng.normal(0.0, 100.0, size=100), y + rng.normal(0.0, 0.05, size=100)])

    raw = NearestMeanClassifier(class_count=2).fit(X, y)
    scaled = NearestMeanClassifier(class_count=2, standardize=True).fit(X, y)

    assert raw.shift is None
    assert scaled.shift.shape == (2,)
    assert np.mean(scaled.predict(X) == y) > np.mean(raw.predict(X) == y)
    assert np.mean(scaled.predict(X) == y) > 0.95


def test_classification_metrics():
    """Test accuracy, recall and confusion matrix."""
    m = classification_metrics(np.array([0, 0, 1, 1]), np.array([0, 1, 1, 1]), 2)
    assert m["accuracy"] == 0.75
    assert m["recall"] == [0.5, 1.0]
    assert m["confusion"] == [[1, 1], [0, 2]]


def test_train_dknn_history():
    """Test history records one entry per batch, rejected batches included."""
    points = generate_labeled_points(30, MEANS, STDS, rng=np.random.RandomState(0))
    batches = make_training_batches(points, 10)
    batches[1][3] = None

    clf = DilutedKNNClassifier(class_count=2, batch_size=10)
    hist = train_dknn(clf, batches)

    assert hist.accepted == [True, False, True]
    assert hist.n_rejected == 1
    assert sum(hist.counts[-1]) == 20
    assert hist.counts[1] == hist.counts[0]
    assert len(hist.spread) == len(hist.overconfidence) == 3


def test_run_experiment():
    """Test the end-to-end harness on a small configuration."""
    run = run_experiment(_small_config())
    results = run["results"]

    assert set(results) == {"dknn", "nearest_mean", "random"}
    assert results["dknn"]["metrics"]["accuracy"] > 0.8
    assert results["nearest_mean"]["metrics"]["accuracy"] > 0.9
    assert len(results["dknn"]["rows"]) == 60


def test_state_json_round_trip(tmp_path):
    """Test the learned state can be saved and reloaded."""
    run = run_experiment(_small_config())
    path = str(tmp_path / "state.json")
    save_state_json(run["classifier"].state, path)

    with open(path) as f:
        assert json.load(f)["class_count"] == 3
    restored = load_state_json(path)
    assert restored.counts.tolist() == run["classifier"].state.counts.tolist()


def test_csv_writers(tmp_path):
    """Test history and row CSV writers."""
    run = run_experiment(_small_config())
    hist_path = str(tmp_path / "history.csv")
    save_training_history_csv(run["history"], hist_path)
    with open(hist_path) as f:
        lines = f.read().splitlines()
    assert lines[0].startswith("batch,accepted,spread_0")
    assert len(lines) == 1 + len(run["history"].accepted)

    rows_path = str(tmp_path / "rows.csv")
    save_rows_csv(run["results"]["dknn"]["rows"], rows_path)
    assert os.path.getsize(rows_path) > 0

    with pytest.raises(ValueError):
        save_rows_csv([], rows_path)


def test_confidence_map_and_plots():
    """Test the map shape and that every figure is produced."""
    run = run_experiment(_small_config())
    clf = run["classifier"]

    xs, ys, winner, conf = confidence_map(clf, (-10.0, 90.0), (-10.0, 90.0), resolution=8)
    assert winner.shape == conf.shape == (8, 8)
    assert ((0 <= winner) & (winner < 3)).all()
    assert ((0.0 <= conf) & (conf <= 1.0)).all()

    figs = {"map": plot_confidence_map(clf, run["test_points"], resolution=8)}
    figs.update(plot_parameter_history(run["history"]))
    figs.update(plot_compare_accuracy(run["results"]))
    assert set(figs) == {
        "map", "spread_history", "overconfidence_history",
        "compare_accuracy", "compare_recall_per_class",
    }
    plt.close("all")
