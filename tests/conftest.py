import pytest

from tunkrank.graph import Graph
from tunkrank.program import initVertex


class RecordingContext:
    def __init__(self) -> None:
        self.signaled = []
        self.iteration = 0

    def signal(self, vertex) -> None:
        self.signaled.append(vertex.id)


def makeGraph(edges, vertices=()) -> Graph:
    graph = Graph()
    for vertexID in vertices:
        graph.addVertex(vertexID)
    for src, dst in edges:
        graph.addEdge(src, dst)
    graph.finalize()
    graph.transformVertices(initVertex)
    return graph


@pytest.fixture
def build():
    return makeGraph


@pytest.fixture
def context() -> RecordingContext:
    return RecordingContext()


@pytest.fixture
def mutualFollow() -> Graph:
    return makeGraph([("A", "B"), ("B", "A")])


@pytest.fixture
def followers() -> Graph:
    # 1 follows 0 and 2; 2 follows 0; 3 follows 0, 1 and 2; 4 follows 1; 5 is isolated
    return makeGraph([(1, 0), (2, 0), (3, 0), (1, 2), (3, 1), (3, 2), (4, 1)], vertices=[5])
