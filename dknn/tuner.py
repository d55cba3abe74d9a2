# dknn/tuner.py
from __future__ import annotations
from typing import Sequence

from .config import SPREAD_STEP_HIGH, OVERCONFIDENCE_STEP_HIGH
from .geometry import distance as point_distance
from .points import DataPoint, ClassCenter, DilutionParameters, is_valid_class


def tune_dilution_parameters(
    params: Sequence[DilutionParameters],
    class_index: int,
    distance: float,
    spread_step: float = SPREAD_STEP_HIGH,
    overconfidence_step: float = OVERCONFIDENCE_STEP_HIGH,
) -> None:
    """
    Adjust one class's parameters from the distance between a point known to
    belong to it and its centroid:
      - farther than the overconfidence radius: spread grows (slower decay)
      - closer than the radius: the radius grows
      - exactly on the radius: nothing changes
    Neither parameter is ever decreased. Invalid class indices are ignored.
    """
    if not is_valid_class(class_index, len(params)):
        return

    p = params[class_index]
    if distance > p.overconfidence:
        p.spread += spread_step
    elif distance < p.overconfidence:
        p.overconfidence += overconfidence_step


def tune_from_batch(
    params: Sequence[DilutionParameters],
    batch: Sequence[DataPoint],
    centers: Sequence[ClassCenter],
    spread_step: float = SPREAD_STEP_HIGH,
    overconfidence_step: float = OVERCONFIDENCE_STEP_HIGH,
) -> None:
    class_count = min(len(params), len(centers))
    for point in batch:
        c = point.label
        if not is_valid_class(c, class_count):
            continue
        tune_dilution_parameters(
            params, c, point_distance(point, centers[c]),
            spread_step=spread_step,
            overconfidence_step=overconfidence_step,
        )
