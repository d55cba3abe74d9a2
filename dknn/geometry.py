# dknn/geometry.py
from __future__ import annotations
import numpy as np

from .points import DataPoint, ClassCenter


def square(v: float) -> float:
    return v * v


def distance(point: DataPoint, center: ClassCenter) -> float:
    """Euclidean distance between a point and a class center."""
    dx = square(abs(point.x - center.x))
    dy = square(abs(point.y - center.y))
    return float(np.sqrt(dx + dy))
