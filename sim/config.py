# sim/config.py
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Tuple

from dknn.config import BATCH_SIZE, MAP_RESOLUTION, DilutionConfig


@dataclass
class ClassGenConfig:
    name: str
    mean: Tuple[float, float]
    std: float = 3.0


def default_classes() -> List[ClassGenConfig]:
    # (pulse rate, pulse amplitude) clusters
    return [
        ClassGenConfig(name="resting", mean=(20.0, 20.0), std=4.0),
        ClassGenConfig(name="training", mean=(55.0, 35.0), std=5.0),
        ClassGenConfig(name="panic", mean=(80.0, 75.0), std=6.0),
    ]


@dataclass
class DataGenConfig:
    classes: List[ClassGenConfig] = field(default_factory=default_classes)

    def to_kwargs(self) -> Dict:
        """Convert to arguments expected by generate_labeled_points()."""
        return {
            "means": [c.mean for c in self.classes],
            "stds": [c.std for c in self.classes],
        }

    def class_names(self) -> List[str]:
        return [c.name for c in self.classes]


@dataclass
class TrainConfig:
    # overconfidence only ever grows, long runs end with every radius covering the plane
    n_batches: int = 20
    batch_size: int = BATCH_SIZE
    seed: int = 0

    # probability that an acquired entry is missing (drops its whole batch)
    missing_rate: float = 0.0005

    tune: bool = True
    dilution: DilutionConfig = field(default_factory=DilutionConfig)


@dataclass
class TestConfig:
    n_points: int = 600
    seed: int = 1  # deterministic test set


@dataclass
class MapConfig:
    resolution: int = MAP_RESOLUTION
    margin: float = 10.0


@dataclass
class SimConfig:
    seed: int = 0
    data: DataGenConfig = field(default_factory=DataGenConfig)
    train: TrainConfig = field(default_factory=TrainConfig)
    test: TestConfig = field(default_factory=TestConfig)
    map: MapConfig = field(default_factory=MapConfig)

    @property
    def class_count(self) -> int:
        return len(self.data.classes)

    def to_dict(self):
        return asdict(self)
