"""
Gather-Apply-Scatter vertex programs.

An engine activates a vertex, folds `gather` over the edges selected by
`gatherEdges` with `combine`, hands the total to `apply` exactly once, and
then calls `scatter` on every edge selected by `scatterEdges`.

TunkRank: http://thenoisychannel.com/2009/01/13/a-twitter-analog-to-pagerank/
"""
import abc
import struct
from enum import Enum

from tunkrank.config import ExecutionMode, TunkRankConfig


class EdgeDir(Enum):
    NONE = "none"
    IN = "in"
    OUT = "out"
    ALL = "all"


class VertexProgram(abc.ABC):
    @abc.abstractmethod
    def gather(self, context, vertex, edge):
        pass

    @abc.abstractmethod
    def apply(self, context, vertex, total) -> None:
        pass

    @abc.abstractmethod
    def scatterEdges(self, context, vertex) -> EdgeDir:
        pass

    @abc.abstractmethod
    def scatter(self, context, vertex, edge) -> None:
        pass

    @abc.abstractmethod
    def serialize(self) -> bytes:
        pass

    @abc.abstractmethod
    def deserialize(self, data: bytes) -> None:
        pass

    def gatherEdges(self, context, vertex) -> EdgeDir:
        return EdgeDir.IN

    # combine must be associative and commutative, gathers are partial and unordered
    @staticmethod
    def combine(a, b):
        return a + b

    @staticmethod
    def gatherIdentity():
        return 0.0


def initVertex(vertex) -> None:
    vertex.data = 1.0


class TunkRank(VertexProgram):
    """
    The influence of a vertex is the attention it gets from its followers:
    each follower reads it with weight 1 / (number of people it follows) and
    passes it on to its own followers with probability retweetProb.
    """

    DELTA_FORMAT = struct.Struct("<d")

    def __init__(self, config: TunkRankConfig) -> None:
        self.config = config
        self.mode = config.mode
        # the last change only exists when running until convergence
        if self.mode is ExecutionMode.DYNAMIC:
            self.lastChange = 0.0

    def gather(self, context, vertex, edge) -> float:
        source = edge.source()
        return (1.0 + self.config.retweetProb * source.data) / source.numOutEdges()

    def apply(self, context, vertex, total: float) -> None:
        if self.mode is ExecutionMode.FIXED:
            vertex.data = total
            context.signal(vertex)
        else:
            self.lastChange = abs(total - vertex.data)
            vertex.data = total

    def scatterEdges(self, context, vertex) -> EdgeDir:
        if self.mode is ExecutionMode.FIXED:
            return EdgeDir.NONE
        if self.lastChange > self.config.tolerance:
            return EdgeDir.OUT
        return EdgeDir.NONE

    def scatter(self, context, vertex, edge) -> None:
        context.signal(edge.target())

    def serialize(self) -> bytes:
        if self.mode is ExecutionMode.FIXED:
            return b""
        return TunkRank.DELTA_FORMAT.pack(self.lastChange)

    def deserialize(self, data: bytes) -> None:
        if self.mode is ExecutionMode.FIXED:
            return
        if len(data) != TunkRank.DELTA_FORMAT.size:
            raise ValueError(
                f"expected {TunkRank.DELTA_FORMAT.size} bytes of program state, got {len(data)}"
            )
        (self.lastChange,) = TunkRank.DELTA_FORMAT.unpack(data)

    @staticmethod
    def factory(config: TunkRankConfig):
        return lambda: TunkRank(config)
