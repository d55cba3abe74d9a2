# dknn/aggregator.py
from __future__ import annotations
from typing import Callable, MutableSequence, Optional, Sequence

from .points import DataPoint, ClassCenter, is_valid_class

WeightFn = Callable[[DataPoint, int], float]


def uniform_weight(point: DataPoint, position: int) -> float:
    return 1.0


def recency_weight(decay: float, batch_size: int) -> WeightFn:
    """
    Within-batch recency: the i-th of `batch_size` points weighs
    decay**(batch_size - 1 - i), so the newest point of a batch weighs 1 and
    older ones less. Positions restart with every batch; weights never exceed 1
    and may underflow to 0, which leaves the point out.
    """
    if not 0.0 < decay <= 1.0:
        raise ValueError("decay must be in (0, 1].")
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1.")

    def weight(point: DataPoint, position: int) -> float:
        return decay ** max(0, batch_size - 1 - position)

    return weight


def _fold(center: ClassCenter, point: DataPoint, weight_so_far: float, weight: float) -> None:
    if weight_so_far == 0:
        center.x = point.x
        center.y = point.y
        return
    total = weight_so_far + weight
    center.x = ((weight_so_far * center.x) + weight * point.x) / total
    center.y = ((weight_so_far * center.y) + weight * point.y) / total


def update_centers(
    batch: Sequence[DataPoint],
    centers: Sequence[ClassCenter],
    counts: MutableSequence[int],
) -> None:
    """
    Fold a labeled batch into the running class centroids, in place.

    For a point of class c the new centroid is (n*old + p) / (n+1) with
    n = counts[c], and counts[c] grows by exactly one. A centroid with n == 0
    jumps straight to the point. Points whose label is not a valid class
    index are skipped.
    """
    class_count = min(len(centers), len(counts))
    for point in batch:
        c = point.label
        if not is_valid_class(c, class_count):
            continue
        _fold(centers[c], point, counts[c], 1)
        counts[c] += 1


def update_weighted_centers(
    batch: Sequence[DataPoint],
    centers: Sequence[ClassCenter],
    weights: MutableSequence[float],
    weight_fn: WeightFn = uniform_weight,
    counts: Optional[MutableSequence[int]] = None,
) -> None:
    """
    Weighted variant of update_centers(): each point carries weight_fn(point, i)
    and weights[c] accumulates the total weight of class c. Points with a
    non-positive weight contribute nothing. With uniform_weight this is the
    plain running mean.
    """
    class_count = min(len(centers), len(weights))
    for i, point in enumerate(batch):
        c = point.label
        if not is_valid_class(c, class_count):
            continue
        w = float(weight_fn(point, i))
        if w <= 0:
            continue
        _fold(centers[c], point, weights[c], w)
        weights[c] += w
        if counts is not None:
            counts[c] += 1
