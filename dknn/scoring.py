# dknn/scoring.py
from __future__ import annotations
import numpy as np

from .points import DilutionParameters


def within_overconfidence_circle(distance: float, params: DilutionParameters) -> bool:
    return distance <= params.overconfidence


def base_function(distance: float, params: DilutionParameters) -> float:
    """exp(-|distance - overconfidence| / spread), always in (0, 1] for spread > 0."""
    if not params.spread > 0:
        raise ValueError(f"spread must be > 0, got {params.spread}.")
    return float(np.exp(-abs(distance - params.overconfidence) / params.spread))


def confidence(distance: float, params: DilutionParameters) -> float:
    if within_overconfidence_circle(distance, params):
        return 1.0
    return base_function(distance, params)
