# sim/evaluate.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
import numpy as np

from dknn.classifier import DilutedKNNClassifier
from dknn.points import DataPoint
from .baseline import NearestMeanClassifier


# ----------------------------
# Training history (for parameter plotting/logging)
# ----------------------------
@dataclass
class TrainHistory:
    accepted: List[bool] = field(default_factory=list)
    spread: List[List[float]] = field(default_factory=list)          # per batch, per class
    overconfidence: List[List[float]] = field(default_factory=list)  # per batch, per class
    counts: List[List[int]] = field(default_factory=list)

    @property
    def n_rejected(self) -> int:
        return sum(1 for a in self.accepted if not a)


def train_dknn(
    clf: DilutedKNNClassifier,
    batches: Sequence[Sequence[Optional[DataPoint]]],
) -> TrainHistory:
    """Feed batches in order, recording the learned parameters after each one."""
    hist = TrainHistory()
    for batch in batches:
        hist.accepted.append(clf.partial_fit(batch))
        params = clf.parameters()
        hist.spread.append(params[:, 0].tolist())
        hist.overconfidence.append(params[:, 1].tolist())
        hist.counts.append(clf.state.snapshot()["counts"])
    return hist


def classification_metrics(y_true: np.ndarray, y_pred: np.ndarray, class_count: int) -> Dict[str, Any]:
    confusion = np.zeros((class_count, class_count), dtype=np.int64)
    for t, p in zip(y_true, y_pred):
        confusion[int(t), int(p)] += 1

    support = confusion.sum(axis=1)
    recall = [
        float(confusion[c, c] / support[c]) if support[c] > 0 else 0.0
        for c in range(class_count)
    ]
    total = int(confusion.sum())
    accuracy = float(np.trace(confusion) / total) if total > 0 else 0.0
    return {
        "accuracy": accuracy,
        "recall": recall,
        "support": support.tolist(),
        "confusion": confusion.tolist(),
    }


def _prediction_rows(method: str, points: Sequence[DataPoint], y_pred: np.ndarray) -> List[Dict[str, Any]]:
    return [
        {
            "method": method,
            "x": float(p.x),
            "y": float(p.y),
            "label": int(p.label),
            "predicted": int(yp),
        }
        for p, yp in zip(points, y_pred)
    ]


def _run_method(
    method: str,
    predict_one: Callable[[DataPoint], int],
    points: Sequence[DataPoint],
    class_count: int,
) -> Dict[str, Any]:
    y_true = np.array([p.label for p in points], dtype=np.int64)
    y_pred = np.array([predict_one(p) for p in points], dtype=np.int64)
    return {
        "method": method,
        "metrics": classification_metrics(y_true, y_pred, class_count),
        "rows": _prediction_rows(method, points, y_pred),
    }


def run_method_dknn(clf: DilutedKNNClassifier, points: Sequence[DataPoint]) -> Dict[str, Any]:
    return _run_method("dknn", clf.predict_one, points, clf.class_count)


def run_method_nearest_mean(clf: NearestMeanClassifier, points: Sequence[DataPoint]) -> Dict[str, Any]:
    return _run_method("nearest_mean", lambda p: clf.predict_one(p.as_array()), points, clf.class_count)


def run_method_random(points: Sequence[DataPoint], class_count: int, seed: int = 0) -> Dict[str, Any]:
    rng = np.random.RandomState(seed)
    return _run_method("random", lambda p: int(rng.randint(0, class_count)), points, class_count)
