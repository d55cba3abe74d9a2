# dknn/trace.py
from __future__ import annotations
from typing import Any, Dict, List

from .points import DataPoint


def console_observer(point: DataPoint, confidences: List[float], winner: int) -> None:
    print(f"results for test data at [{point.x:f}, {point.y:f}]:")
    for index, conf in enumerate(confidences):
        print(f"class {index + 1} has confidence value of {conf:f}")
    print(f"input data belongs to class {winner}\tconfidence: {confidences[winner]:f}")
    print(" ")


class ConfidenceRecorder:
    """Observer that keeps one row per classified point (for CSV export)."""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []

    def __call__(self, point: DataPoint, confidences: List[float], winner: int) -> None:
        row: Dict[str, Any] = {
            "x": float(point.x),
            "y": float(point.y),
            "label": point.label if point.label is not None else "",
            "predicted": int(winner),
            "confidence": float(confidences[winner]),
        }
        for index, conf in enumerate(confidences):
            row[f"conf_{index}"] = float(conf)
        self.rows.append(row)

    def clear(self) -> None:
        self.rows.clear()
