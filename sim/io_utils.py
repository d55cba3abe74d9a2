# sim/io_utils.py
from __future__ import annotations
from typing import Any, Dict, List
import os
import json
import csv

from dknn.state import DknnState
from .evaluate import TrainHistory


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def save_json(obj: Dict[str, Any], path: str) -> None:
    with open(path, "w") as f:
        json.dump(obj, f, indent=2)


def save_rows_csv(rows: List[Dict[str, Any]], path: str) -> None:
    if not rows:
        raise ValueError("No rows to save.")

    keys = list(rows[0].keys())
    with open(path, "w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=keys)
        w.writeheader()
        for r in rows:
            w.writerow(r)


def save_state_json(state: DknnState, path: str) -> None:
    save_json(state.snapshot(), path)


def load_state_json(path: str) -> DknnState:
    with open(path, "r") as f:
        return DknnState.from_dict(json.load(f))


def save_training_history_csv(hist: TrainHistory, path: str) -> None:
    n_classes = len(hist.spread[0]) if hist.spread else 0
    header = ["batch", "accepted"]
    header += [f"spread_{c}" for c in range(n_classes)]
    header += [f"overconfidence_{c}" for c in range(n_classes)]
    header += [f"count_{c}" for c in range(n_classes)]

    with open(path, "w", newline="") as f:
        w = csv.writer(f)
        w.writerow(header)
        for i in range(len(hist.accepted)):
            w.writerow([i, int(hist.accepted[i])] + hist.spread[i] + hist.overconfidence[i] + hist.counts[i])
