# dknn/state.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import threading
import numpy as np

from .config import DilutionConfig
from .points import ClassCenter, DilutionParameters, init_class_center, init_dilution_parameters


@dataclass
class DknnState:
    """
    Everything the classifier learns, owned by the caller:
      - centers[c]: running centroid of class c
      - counts[c]:  number of points aggregated into centers[c]
      - params[c]:  dilution parameters of class c

    `lock` guards all three; readers and writers must hold it so that a
    (center, count) or (spread, overconfidence) pair is never seen half-updated.
    """
    class_count: int
    centers: List[ClassCenter]
    counts: np.ndarray
    params: List[DilutionParameters]
    dilution: DilutionConfig = field(default_factory=DilutionConfig)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def create(cls, class_count: int, dilution: Optional[DilutionConfig] = None) -> "DknnState":
        if class_count < 1:
            raise ValueError("class_count must be >= 1.")
        dilution = dilution or DilutionConfig()
        return cls(
            class_count=class_count,
            centers=[init_class_center() for _ in range(class_count)],
            counts=np.zeros(class_count, dtype=np.int64),
            params=[init_dilution_parameters(dilution) for _ in range(class_count)],
            dilution=dilution,
        )

    def reset(self) -> None:
        with self.lock:
            for c in range(self.class_count):
                self.centers[c] = init_class_center()
                self.params[c] = init_dilution_parameters(self.dilution)
            self.counts[:] = 0

    def is_trained(self) -> bool:
        return bool(self.counts.sum() > 0)

    def snapshot(self) -> Dict[str, Any]:
        """Consistent copy of the learned arrays, taken under the lock."""
        with self.lock:
            return self._as_dict()

    def to_dict(self) -> Dict[str, Any]:
        return self.snapshot()

    def _as_dict(self) -> Dict[str, Any]:
        return {
            "class_count": int(self.class_count),
            "centers": [[float(c.x), float(c.y)] for c in self.centers],
            "counts": [int(n) for n in self.counts],
            "params": [
                {"spread": float(p.spread), "overconfidence": float(p.overconfidence)}
                for p in self.params
            ],
            "dilution": {
                "spread": self.dilution.spread,
                "overconfidence": self.dilution.overconfidence,
                "spread_step": self.dilution.spread_step,
                "overconfidence_step": self.dilution.overconfidence_step,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DknnState":
        class_count = int(data["class_count"])
        centers = [ClassCenter(float(x), float(y)) for x, y in data["centers"]]
        params = [
            DilutionParameters(spread=float(p["spread"]), overconfidence=float(p["overconfidence"]))
            for p in data["params"]
        ]
        counts = np.array(data["counts"], dtype=np.int64)
        if not (len(centers) == len(params) == len(counts) == class_count):
            raise ValueError("centers, counts and params must all have class_count entries.")

        dilution = DilutionConfig(**data["dilution"]) if "dilution" in data else DilutionConfig()
        return cls(
            class_count=class_count,
            centers=centers,
            counts=counts,
            params=params,
            dilution=dilution,
        )
