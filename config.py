from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np


@dataclass
class Config:
    # channel
    DELAYS_MS: np.ndarray = field(default_factory=lambda: np.array([10, 20, 30], dtype=int))
    THREAD_SAFE: bool = False   # lock around the buffer (opt-in)

    # randomness
    SEED: Optional[int] = None  # seeds np.random once per process when set

    # logging
    LOG_LEVEL: str = "INFO"

    # demo run (main.py)
    MESSAGE: str = "hello"
    READS: int = 1

    def delays(self) -> List[int]:
        return [int(d) for d in np.asarray(self.DELAYS_MS).ravel()]
