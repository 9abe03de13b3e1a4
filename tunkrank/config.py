from dataclasses import dataclass
from enum import Enum


class ExecutionMode(Enum):
    FIXED = "fixed"
    DYNAMIC = "dynamic"


class EngineType(Enum):
    SYNCHRONOUS = "synchronous"
    ASYNCHRONOUS = "asynchronous"


@dataclass(frozen=True)
class TunkRankConfig:
    """
    Parameters of a TunkRank run.

    retweetProb: Probability that a follower retweets what it reads
    tolerance: Change of a score below which a vertex stops signaling its followees
    iterations: Number of synchronous rounds, 0 runs until convergence
    """

    RETWEET_PROB = 0.05
    TOLERANCE = 1.0e-2

    retweetProb: float = RETWEET_PROB
    tolerance: float = TOLERANCE
    iterations: int = 0

    def __post_init__(self) -> None:
        if not 0.0 <= self.retweetProb <= 1.0:
            raise ValueError(f"retweet probability must be within [0, 1], got {self.retweetProb}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.FIXED if self.iterations > 0 else ExecutionMode.DYNAMIC
