# dknn/points.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np

from .config import SPREAD, OVERCONFIDENCE, DilutionConfig


@dataclass(frozen=True)
class DataPoint:
    x: float
    y: float
    label: Optional[int] = None  # None for unlabeled query points

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass
class ClassCenter:
    x: float = 0.0
    y: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass
class DilutionParameters:
    """
    Soft decision boundary of one class:
      - overconfidence: radius inside which confidence is clamped to 1
      - spread: decay constant of confidence outside that radius
    """
    spread: float = SPREAD
    overconfidence: float = OVERCONFIDENCE

    def __post_init__(self):
        if not self.spread > 0:
            raise ValueError(f"spread must be > 0, got {self.spread}.")


def is_valid_class(label, class_count: int) -> bool:
    # bools and negative ints are rejected so they never index from the end
    if isinstance(label, bool) or not isinstance(label, (int, np.integer)):
        return False
    return 0 <= int(label) < class_count


def init_dilution_parameters(config: Optional[DilutionConfig] = None) -> DilutionParameters:
    if config is None:
        return DilutionParameters()
    return DilutionParameters(spread=config.spread, overconfidence=config.overconfidence)


def init_class_center() -> ClassCenter:
    return ClassCenter(0.0, 0.0)
