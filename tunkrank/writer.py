import heapq
from typing import Hashable

from tunkrank.graph import Graph


class TunkRankWriter:
    """Formats the final graph as one `id<TAB>score` line per vertex; edges are not written."""

    def saveVertex(self, vertex) -> str:
        return f"{vertex.id}\t{vertex.data}\n"

    def saveEdge(self, edge) -> str:
        return ""


def topK(graph: Graph, k: int) -> list[tuple[Hashable, float]]:
    return heapq.nlargest(k, ((v.id, v.data) for v in graph.vertices()), key=lambda x: x[1])
