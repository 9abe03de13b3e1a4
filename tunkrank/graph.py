import gzip as gz
import logging
from pathlib import Path
from typing import Callable, Hashable, Iterator

import networkx as nx

from tunkrank.program import EdgeDir

logger = logging.getLogger(__name__)


class VertexHandle:
    """View on one vertex of a Graph. The score lives in the node attribute `data`."""

    __slots__ = ("graph", "id")

    def __init__(self, graph: "Graph", vertexID: Hashable) -> None:
        self.graph = graph
        self.id = vertexID

    @property
    def data(self) -> float:
        return self.graph.nxGraph.nodes[self.id][Graph.DATA_KEY]

    @data.setter
    def data(self, value: float) -> None:
        self.graph.nxGraph.nodes[self.id][Graph.DATA_KEY] = value

    def numOutEdges(self) -> int:
        return self.graph.numOutEdges(self.id)

    def numInEdges(self) -> int:
        return self.graph.numInEdges(self.id)

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, VertexHandle)
            and other.graph is self.graph
            and other.id == self.id
        )

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"VertexHandle({self.id!r})"


class EdgeHandle:
    __slots__ = ("graph", "srcID", "dstID")

    def __init__(self, graph: "Graph", srcID: Hashable, dstID: Hashable) -> None:
        self.graph = graph
        self.srcID = srcID
        self.dstID = dstID

    def source(self) -> VertexHandle:
        return VertexHandle(self.graph, self.srcID)

    def target(self) -> VertexHandle:
        return VertexHandle(self.graph, self.dstID)

    def __repr__(self) -> str:
        return f"EdgeHandle({self.srcID!r} -> {self.dstID!r})"


class Graph:
    """
    Directed multigraph of follows relations.

    Topology is mutable until finalize() is called; afterwards only the
    per-vertex data may change.
    """

    DATA_KEY = "data"

    def __init__(self) -> None:
        self.nxGraph = nx.MultiDiGraph()
        self.finalized = False

    def addVertex(self, vertexID: Hashable, data: float = 0.0) -> None:
        self.nxGraph.add_node(vertexID, **{Graph.DATA_KEY: data})

    def addEdge(self, srcID: Hashable, dstID: Hashable) -> None:
        for vertexID in (srcID, dstID):
            if vertexID not in self.nxGraph:
                self.addVertex(vertexID)
        self.nxGraph.add_edge(srcID, dstID)

    def finalize(self) -> None:
        if self.finalized:
            return
        nx.freeze(self.nxGraph)
        self.finalized = True
        logger.info(
            "finalized graph with %d vertices and %d edges",
            self.numVertices(),
            self.numEdges(),
        )

    def requireFinalized(self) -> None:
        if not self.finalized:
            raise RuntimeError("graph must be finalized before it is queried")

    def numVertices(self) -> int:
        return self.nxGraph.number_of_nodes()

    def numEdges(self) -> int:
        return self.nxGraph.number_of_edges()

    def numOutEdges(self, vertexID: Hashable) -> int:
        self.requireFinalized()
        return self.nxGraph.out_degree(vertexID)

    def numInEdges(self, vertexID: Hashable) -> int:
        self.requireFinalized()
        return self.nxGraph.in_degree(vertexID)

    def __contains__(self, vertexID: Hashable) -> bool:
        return vertexID in self.nxGraph

    def vertex(self, vertexID: Hashable) -> VertexHandle:
        if vertexID not in self.nxGraph:
            raise KeyError(vertexID)
        return VertexHandle(self, vertexID)

    def vertexIDs(self) -> list[Hashable]:
        return [*self.nxGraph.nodes]

    def vertices(self) -> Iterator[VertexHandle]:
        for vertexID in self.nxGraph.nodes:
            yield VertexHandle(self, vertexID)

    def inEdges(self, vertexID: Hashable) -> Iterator[EdgeHandle]:
        self.requireFinalized()
        for src, dst in self.nxGraph.in_edges(vertexID):
            yield EdgeHandle(self, src, dst)

    def outEdges(self, vertexID: Hashable) -> Iterator[EdgeHandle]:
        self.requireFinalized()
        for src, dst in self.nxGraph.out_edges(vertexID):
            yield EdgeHandle(self, src, dst)

    def edges(self, vertexID: Hashable, direction: EdgeDir) -> Iterator[EdgeHandle]:
        if direction in (EdgeDir.IN, EdgeDir.ALL):
            yield from self.inEdges(vertexID)
        if direction in (EdgeDir.OUT, EdgeDir.ALL):
            yield from self.outEdges(vertexID)

    def transformVertices(self, fn: Callable[[VertexHandle], None]) -> None:
        for vertex in self.vertices():
            fn(vertex)

    def save(
        self,
        prefix: str,
        writer,
        gzip: bool = False,
        saveVertices: bool = True,
        saveEdges: bool = False,
    ) -> Path:
        """
        Write one record per vertex (and per edge if requested) using the
        writer's saveVertex/saveEdge. Empty records are skipped.
        """
        path = Path(f"{prefix}_1_of_1" + (".gz" if gzip else ""))
        path.parent.mkdir(parents=True, exist_ok=True)
        opener = gz.open if gzip else open
        with opener(path, mode="wt") as f:
            if saveVertices:
                for vertex in self.vertices():
                    record = writer.saveVertex(vertex)
                    if record:
                        f.write(record)
            if saveEdges:
                for src, dst in self.nxGraph.edges():
                    record = writer.saveEdge(EdgeHandle(self, src, dst))
                    if record:
                        f.write(record)
        logger.info("saved graph to %s", path)
        return path
