# dknn/classifier.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union
import numpy as np

from .batch import validate_batch, split_batches
from .aggregator import update_centers
from .config import NUM_OF_CLASSES, BATCH_SIZE, DilutionConfig, DknnConfig
from .geometry import distance
from .points import DataPoint, ClassCenter, DilutionParameters
from .scoring import confidence
from .state import DknnState
from .tuner import tune_from_batch

Observer = Callable[[DataPoint, List[float], int], None]


def _check_arrays(params: Sequence[DilutionParameters], centers: Sequence[ClassCenter], class_count: int) -> None:
    if class_count < 1:
        raise ValueError("class_count must be >= 1.")
    if len(params) < class_count or len(centers) < class_count:
        raise ValueError(
            f"need {class_count} parameters and centers, got {len(params)} and {len(centers)}."
        )


def score_classes(
    point: DataPoint,
    params: Sequence[DilutionParameters],
    centers: Sequence[ClassCenter],
    class_count: int,
) -> List[float]:
    _check_arrays(params, centers, class_count)
    return [confidence(distance(point, centers[c]), params[c]) for c in range(class_count)]


def _select(confidences: List[float]) -> Tuple[int, float]:
    best = 0
    best_conf = confidences[0]
    for index in range(1, len(confidences)):
        # ties keep the earlier class
        if best_conf < confidences[index]:
            best = index
            best_conf = confidences[index]
    return best, best_conf


def classify_with_confidence(
    point: DataPoint,
    params: Sequence[DilutionParameters],
    centers: Sequence[ClassCenter],
    class_count: int,
    observer: Optional[Observer] = None,
) -> Tuple[int, float]:
    confidences = score_classes(point, params, centers, class_count)
    best, best_conf = _select(confidences)
    if observer is not None:
        observer(point, confidences, best)
    return best, best_conf


def classify(
    point: DataPoint,
    params: Sequence[DilutionParameters],
    centers: Sequence[ClassCenter],
    class_count: int,
    observer: Optional[Observer] = None,
) -> int:
    """
    Index of the class with the highest confidence for `point`.

    Class 0 always seeds the running best; a later class only replaces it with
    a strictly greater confidence. `observer`, if given, receives the point, the
    per-class confidences and the winner.
    """
    return classify_with_confidence(point, params, centers, class_count, observer=observer)[0]


PointLike = Union[DataPoint, Sequence[float], np.ndarray]


def _as_point(x: PointLike) -> DataPoint:
    if isinstance(x, DataPoint):
        arr = np.array([x.x, x.y], dtype=float)
    else:
        arr = np.asarray(x, dtype=float).reshape(-1)
    if arr.shape[0] != 2:
        raise ValueError("point must have exactly 2 coordinates.")
    if not np.isfinite(arr).all():
        raise ValueError("point coordinates must be finite.")
    if isinstance(x, DataPoint):
        return x
    return DataPoint(float(arr[0]), float(arr[1]))


def _as_label(c):
    # integral floats become class indices, anything else is left for is_valid_class to drop
    value = c.item() if isinstance(c, np.generic) else c
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass
class DilutedKNNClassifier:
    """
    Online diluted kNN:
      - keep one running centroid per class (no stored training set)
      - adapt (spread, overconfidence) per class from same-class distances
      - assign a query to the class of highest confidence

    Training data arrives in fixed-size batches; a batch with any unusable
    entry is dropped whole.
    """
    class_count: int = NUM_OF_CLASSES
    batch_size: int = BATCH_SIZE
    dilution: DilutionConfig = field(default_factory=DilutionConfig)
    tune: bool = True
    notify: Optional[Callable[[str], None]] = None
    observer: Optional[Observer] = None

    state: Optional[DknnState] = None

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1.")
        if self.state is None:
            self.state = DknnState.create(self.class_count, self.dilution)
        elif self.state.class_count != self.class_count:
            raise ValueError("state.class_count does not match class_count.")
        else:
            # reset() and tuning both follow the config the state was built with
            self.dilution = self.state.dilution

    @classmethod
    def from_config(cls, cfg: DknnConfig, **kwargs) -> "DilutedKNNClassifier":
        return cls(class_count=cfg.class_count, batch_size=cfg.batch_size, dilution=cfg.dilution, **kwargs)

    def partial_fit(self, batch: Sequence[Optional[DataPoint]]) -> bool:
        """Aggregate and tune on one batch. Returns False if the batch was dropped."""
        if validate_batch(batch, batch_size=self.batch_size, notify=self.notify):
            return False

        with self.state.lock:
            update_centers(batch, self.state.centers, self.state.counts)
            if self.tune:
                tune_from_batch(self.state.params, batch, self.state.centers, **self.state.dilution.to_kwargs())
        return True

    def fit(self, X: np.ndarray, y: np.ndarray) -> "DilutedKNNClassifier":
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        if X.ndim != 2 or X.shape[1] != 2:
            raise ValueError("X must be 2D (N, 2).")
        if y.ndim != 1 or y.shape[0] != X.shape[0]:
            raise ValueError("y must be 1D (N,) and match X.")

        self.state.reset()
        points = [DataPoint(float(a), float(b), _as_label(c)) for (a, b), c in zip(X, y)]
        for batch in split_batches(points, self.batch_size):
            self.partial_fit(batch)
        return self

    def _require_trained(self) -> None:
        if not self.state.is_trained():
            raise RuntimeError("Classifier not fitted yet.")

    def confidences(self, x: PointLike) -> np.ndarray:
        self._require_trained()
        with self.state.lock:
            scores = score_classes(_as_point(x), self.state.params, self.state.centers, self.class_count)
        return np.array(scores, dtype=np.float64)

    def predict_with_confidence(self, x: PointLike) -> Tuple[int, float]:
        self._require_trained()
        point = _as_point(x)
        with self.state.lock:
            confidences = score_classes(point, self.state.params, self.state.centers, self.class_count)
        best, best_conf = _select(confidences)
        # outside the lock, so the observer may read the classifier back
        if self.observer is not None:
            self.observer(point, confidences, best)
        return best, best_conf

    def predict_one(self, x: PointLike) -> int:
        return self.predict_with_confidence(x)[0]

    def predict(self, X: np.ndarray) -> np.ndarray:
        return np.array([self.predict_one(x) for x in np.asarray(X, dtype=float)], dtype=np.int64)

    def centers(self) -> np.ndarray:
        with self.state.lock:
            return np.array([c.as_array() for c in self.state.centers])

    def parameters(self) -> np.ndarray:
        """(class_count, 2) array of [spread, overconfidence]."""
        with self.state.lock:
            return np.array([[p.spread, p.overconfidence] for p in self.state.params], dtype=np.float64)
