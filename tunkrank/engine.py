import functools
import logging
import threading
import time
from collections import Counter, deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Hashable, Optional

from tunkrank.config import EngineType, ExecutionMode, TunkRankConfig
from tunkrank.graph import Graph, VertexHandle
from tunkrank.program import EdgeDir, TunkRank, VertexProgram

logger = logging.getLogger(__name__)


class Context:
    """Handle given to vertex programs while they run one of their phases."""

    def __init__(self, engine: "Engine", iteration: int) -> None:
        self.engine = engine
        self.iteration = iteration

    def signal(self, vertex: VertexHandle) -> None:
        self.engine.signal(vertex.id)


class Engine:
    """
    Runs a vertex program over a finalized graph until no vertex is active.

    The synchronous engine works in rounds: every vertex active at the start of
    a round gathers from the scores of the previous round, then all of them
    apply, then all of them scatter. Vertices signaled during a round run in
    the next one. With maxIterations set it stops after that many rounds.

    The asynchronous engine pulls vertices one at a time from a FIFO queue and
    always sees the latest scores. It stops when the queue drains.
    """

    def __init__(
        self,
        graph: Graph,
        programFactory: Callable[[], VertexProgram],
        engineType: EngineType = EngineType.SYNCHRONOUS,
        maxIterations: int = 0,
        numWorkers: int = 1,
    ) -> None:
        graph.requireFinalized()
        if maxIterations < 0:
            raise ValueError(f"maxIterations must be non-negative, got {maxIterations}")
        if numWorkers < 1:
            raise ValueError(f"numWorkers must be positive, got {numWorkers}")
        if engineType is EngineType.ASYNCHRONOUS and maxIterations:
            raise ValueError("maxIterations requires the synchronous engine")
        self.graph = graph
        self.programFactory = programFactory
        self.engineType = engineType
        self.maxIterations = maxIterations
        self.numWorkers = numWorkers

        self.programs: dict[Hashable, VertexProgram] = {}
        # dicts keep insertion order, so they double as ordered sets
        self.active: dict[Hashable, None] = {}
        self.queue: deque[Hashable] = deque()
        self.lock = threading.Lock()

        self.iteration = 0
        self.numUpdates = 0
        self.updateCounts: Counter = Counter()
        self.startTime: Optional[float] = None
        self.stopTime: Optional[float] = None

    @staticmethod
    def fromConfig(
        graph: Graph,
        config: TunkRankConfig,
        engineType: EngineType = EngineType.SYNCHRONOUS,
        numWorkers: int = 1,
    ) -> "Engine":
        maxIterations = 0
        if config.mode is ExecutionMode.FIXED:
            if engineType is not EngineType.SYNCHRONOUS:
                logger.warning(
                    "iterations set, forcing the synchronous engine instead of %s",
                    engineType.value,
                )
            logger.info("running for %d iterations", config.iterations)
            engineType = EngineType.SYNCHRONOUS
            maxIterations = config.iterations
        return Engine(graph, TunkRank.factory(config), engineType, maxIterations, numWorkers)

    def signal(self, vertexID: Hashable) -> None:
        with self.lock:
            if vertexID in self.active:
                return
            self.active[vertexID] = None
            if self.engineType is EngineType.ASYNCHRONOUS:
                self.queue.append(vertexID)

    def signalAll(self) -> None:
        for vertexID in self.graph.vertexIDs():
            self.signal(vertexID)

    def numActive(self) -> int:
        return len(self.active)

    def program(self, vertexID: Hashable) -> VertexProgram:
        program = self.programs.get(vertexID)
        if program is None:
            program = self.programs[vertexID] = self.programFactory()
        return program

    def start(self) -> None:
        self.startTime = time.perf_counter()
        self.stopTime = None
        if self.engineType is EngineType.SYNCHRONOUS:
            self.runSynchronous()
        else:
            self.runAsynchronous()
        self.stopTime = time.perf_counter()
        logger.info(
            "engine stopped after %d iterations and %d updates in %.3f seconds",
            self.iteration,
            self.numUpdates,
            self.elapsedSeconds(),
        )

    def elapsedSeconds(self) -> float:
        if self.startTime is None:
            return 0.0
        stopTime = self.stopTime if self.stopTime is not None else time.perf_counter()
        return stopTime - self.startTime

    def gatherVertex(self, context: Context, vertexID: Hashable):
        program = self.program(vertexID)
        vertex = VertexHandle(self.graph, vertexID)
        total = program.gatherIdentity()
        for edge in self.graph.edges(vertexID, program.gatherEdges(context, vertex)):
            total = program.combine(total, program.gather(context, vertex, edge))
        return total

    def applyVertex(self, context: Context, vertexID: Hashable, total) -> None:
        self.program(vertexID).apply(context, VertexHandle(self.graph, vertexID), total)
        self.numUpdates += 1
        self.updateCounts[vertexID] += 1

    def syncProgram(self, vertexID: Hashable) -> None:
        # scatter runs on a copy of the program rebuilt from its serialized state
        mirror = self.programFactory()
        mirror.deserialize(self.programs[vertexID].serialize())
        self.programs[vertexID] = mirror

    def scatterVertex(self, context: Context, vertexID: Hashable) -> None:
        program = self.program(vertexID)
        vertex = VertexHandle(self.graph, vertexID)
        direction = program.scatterEdges(context, vertex)
        if direction is EdgeDir.NONE:
            return
        for edge in self.graph.edges(vertexID, direction):
            program.scatter(context, vertex, edge)

    def runSynchronous(self) -> None:
        executor = ThreadPoolExecutor(self.numWorkers) if self.numWorkers > 1 else None
        try:
            while self.active:
                if self.maxIterations and self.iteration >= self.maxIterations:
                    break
                with self.lock:
                    roundVertices = [*self.active]
                    self.active = {}
                context = Context(self, self.iteration)
                logger.info(
                    "iteration %d: %d active vertices", self.iteration, len(roundVertices)
                )

                gather = functools.partial(self.gatherVertex, context)
                if executor is None:
                    totals = [gather(vertexID) for vertexID in roundVertices]
                else:
                    totals = [*executor.map(gather, roundVertices)]

                for vertexID, total in zip(roundVertices, totals):
                    self.applyVertex(context, vertexID, total)
                for vertexID in roundVertices:
                    self.syncProgram(vertexID)
                for vertexID in roundVertices:
                    self.scatterVertex(context, vertexID)
                self.iteration += 1
        finally:
            if executor is not None:
                executor.shutdown()

    def runAsynchronous(self) -> None:
        context = Context(self, 0)
        while self.queue:
            vertexID = self.queue.popleft()
            with self.lock:
                del self.active[vertexID]
            total = self.gatherVertex(context, vertexID)
            self.applyVertex(context, vertexID, total)
            self.syncProgram(vertexID)
            self.scatterVertex(context, vertexID)
