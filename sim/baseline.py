# sim/baseline.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np


@dataclass
class NearestMeanClassifier:
    """
    Comparison method without dilution: one mean per class, fitted offline on
    every kept training point, and argmin distance at query time.

    Both synthetic features share one unit, so scaling is off by default;
    `standardize=True` z-scores them first.
    """
    class_count: int
    standardize: bool = False
    eps: float = 1e-8

    means: Optional[np.ndarray] = None   # (class_count, D)
    shift: Optional[np.ndarray] = None
    scale: Optional[np.ndarray] = None

    def _transform(self, X: np.ndarray) -> np.ndarray:
        if self.shift is None:
            return X
        return (X - self.shift) / self.scale

    def fit(self, X: np.ndarray, y: np.ndarray) -> "NearestMeanClassifier":
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=np.int64)
        if X.ndim != 2 or y.ndim != 1 or len(X) != len(y):
            raise ValueError("X must be (N, D) and y must be (N,).")

        if self.standardize:
            self.shift = X.mean(axis=0)
            self.scale = X.std(axis=0) + self.eps
        Z = self._transform(X)

        support = np.bincount(y[(y >= 0) & (y < self.class_count)], minlength=self.class_count)
        empty = np.flatnonzero(support == 0)
        if empty.size:
            raise ValueError(f"Need at least one sample for class {int(empty[0])}.")

        self.means = np.stack([Z[y == c].mean(axis=0) for c in range(self.class_count)])
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        if self.means is None:
            raise RuntimeError("Classifier not fitted yet.")
        Z = self._transform(np.atleast_2d(np.asarray(X, dtype=float)))
        d = np.linalg.norm(Z[:, None, :] - self.means[None, :, :], axis=2)
        # argmin keeps the lower class index on ties
        return np.argmin(d, axis=1).astype(np.int64)

    def predict_one(self, x: np.ndarray) -> int:
        return int(self.predict(x)[0])
