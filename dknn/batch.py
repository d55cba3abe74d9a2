# dknn/batch.py
from __future__ import annotations
from typing import Callable, Iterator, List, Optional, Sequence
import math

from .points import DataPoint

INVALID_BATCH_NOTICE = "INVALID BATCH FOUND ******************************"


def _entry_is_usable(entry, require_label: bool) -> bool:
    if not isinstance(entry, DataPoint):
        return False
    try:
        if not (math.isfinite(entry.x) and math.isfinite(entry.y)):
            return False
    except TypeError:
        return False
    if require_label and entry.label is None:
        return False
    return True


def validate_batch(
    points: Optional[Sequence[Optional[DataPoint]]],
    batch_size: Optional[int] = None,
    require_labels: bool = True,
    notify: Optional[Callable[[str], None]] = print,
) -> bool:
    """
    Whole-batch acceptance check.

    Returns True if the batch is incomplete and must be dropped: the batch itself
    is missing, its length differs from `batch_size`, or any entry is None, not a
    DataPoint, has a non-finite coordinate, or (with `require_labels`) has no label.
    Nothing is repaired or skipped; `notify` receives a notice on rejection.

    Labels outside the class range do not make a batch incomplete.
    """
    incomplete = points is None
    if not incomplete and batch_size is not None and len(points) != batch_size:
        incomplete = True
    if not incomplete:
        incomplete = not all(_entry_is_usable(p, require_labels) for p in points)

    if incomplete and notify is not None:
        notify(INVALID_BATCH_NOTICE)
    return incomplete


def split_batches(
    points: Sequence[Optional[DataPoint]],
    batch_size: int,
) -> Iterator[List[Optional[DataPoint]]]:
    """
    Yield consecutive fixed-size batches. A short trailing batch is padded with
    None so that validate_batch() rejects it instead of half-processing it.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1.")
    for start in range(0, len(points), batch_size):
        batch = list(points[start:start + batch_size])
        if len(batch) < batch_size:
            batch.extend([None] * (batch_size - len(batch)))
        yield batch
