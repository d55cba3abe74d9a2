# dknn/config.py
from dataclasses import dataclass, asdict, field
from typing import Dict

# dilution parameters
SPREAD = 1.442            # 1/ln(2)
OVERCONFIDENCE = 10.0
MAP_RESOLUTION = 64

# tuner increments
SPREAD_STEP_HIGH = 0.01
OVERCONFIDENCE_STEP_HIGH = 0.05

# hyper parameters
BATCH_SIZE = 50

# resting, training, panic
NUM_OF_CLASSES = 3


@dataclass
class DilutionConfig:
    # initial values for every class
    spread: float = SPREAD
    overconfidence: float = OVERCONFIDENCE

    # online tuning increments
    spread_step: float = SPREAD_STEP_HIGH
    overconfidence_step: float = OVERCONFIDENCE_STEP_HIGH

    def __post_init__(self):
        if not self.spread > 0:
            raise ValueError(f"spread must be > 0, got {self.spread}.")
        if self.overconfidence < 0:
            raise ValueError(f"overconfidence must be >= 0, got {self.overconfidence}.")
        if self.spread_step < 0 or self.overconfidence_step < 0:
            raise ValueError("tuning steps must be >= 0.")

    def to_kwargs(self) -> Dict:
        """Arguments expected by tune_dilution_parameters()."""
        return {
            "spread_step": self.spread_step,
            "overconfidence_step": self.overconfidence_step,
        }


@dataclass
class DknnConfig:
    class_count: int = NUM_OF_CLASSES
    batch_size: int = BATCH_SIZE
    dilution: DilutionConfig = field(default_factory=DilutionConfig)

    def __post_init__(self):
        if self.class_count < 1:
            raise ValueError("class_count must be >= 1.")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1.")

    def to_dict(self):
        return asdict(self)
