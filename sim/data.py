# sim/data.py
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import csv
import numpy as np

from dknn.points import DataPoint
from dknn.batch import split_batches


def generate_labeled_points(
    n_points: int,
    means: Sequence[Tuple[float, float]],
    stds: Sequence[float],
    rng: Optional[np.random.RandomState] = None,
) -> List[DataPoint]:
    """Draw `n_points` labeled points, class chosen uniformly, each class an isotropic Gaussian."""
    if len(means) != len(stds):
        raise ValueError("means and stds must have the same length.")
    if len(means) == 0:
        raise ValueError("need at least one class.")
    rng = rng or np.random.RandomState()

    labels = rng.randint(0, len(means), size=n_points)
    points: List[DataPoint] = []
    for c in labels:
        mx, my = means[c]
        x = rng.normal(mx, stds[c])
        y = rng.normal(my, stds[c])
        points.append(DataPoint(x=float(x), y=float(y), label=int(c)))
    return points


def make_training_batches(
    points: Sequence[DataPoint],
    batch_size: int,
    missing_rate: float = 0.0,
    rng: Optional[np.random.RandomState] = None,
) -> List[List[Optional[DataPoint]]]:
    """
    Cut a point stream into fixed-size batches. Each entry is lost (None) with
    probability `missing_rate`, emulating acquisition gaps.
    """
    rng = rng or np.random.RandomState()
    stream: List[Optional[DataPoint]] = []
    for p in points:
        stream.append(None if (missing_rate > 0 and rng.uniform() < missing_rate) else p)
    return list(split_batches(stream, batch_size))


def points_to_arrays(points: Sequence[DataPoint]) -> Tuple[np.ndarray, np.ndarray]:
    X = np.array([[p.x, p.y] for p in points], dtype=np.float64).reshape(-1, 2)
    y = np.array([p.label for p in points], dtype=np.int64)
    return X, y


def save_points_csv(points: Sequence[DataPoint], path: str) -> None:
    with open(path, "w", newline="") as f:
        w = csv.writer(f)
        w.writerow(["x", "y", "label"])
        for p in points:
            w.writerow([p.x, p.y, "" if p.label is None else p.label])


def load_points_csv(path: str) -> List[DataPoint]:
    points: List[DataPoint] = []
    with open(path, "r", newline="") as f:
        r = csv.DictReader(f)
        for row in r:
            label = int(row["label"]) if row["label"] != "" else None
            points.append(DataPoint(x=float(row["x"]), y=float(row["y"]), label=label))
    return points
