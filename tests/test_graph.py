import gzip

import networkx as nx
import pytest

from tunkrank.graph import Graph
from tunkrank.program import EdgeDir
from tunkrank.writer import TunkRankWriter, topK


def test_finalized_topology_is_frozen(mutualFollow):
    with pytest.raises(nx.NetworkXError):
        mutualFollow.addEdge("A", "B")
    with pytest.raises(nx.NetworkXError):
        mutualFollow.addEdge("A", "C")
    # vertex data stays writable
    mutualFollow.vertex("A").data = 2.0
    assert mutualFollow.vertex("A").data == 2.0


def test_degree_queries_need_finalize():
    graph = Graph()
    graph.addEdge(1, 2)
    with pytest.raises(RuntimeError):
        graph.numOutEdges(1)
    with pytest.raises(RuntimeError):
        list(graph.inEdges(2))
    graph.finalize()
    assert graph.numOutEdges(1) == 1


def test_duplicate_follows_are_kept(build):
    graph = build([(1, 2), (1, 2), (1, 3)])
    assert graph.numEdges() == 3
    assert graph.vertex(1).numOutEdges() == 3
    assert graph.vertex(2).numInEdges() == 2
    assert [e.srcID for e in graph.inEdges(2)] == [1, 1]


def test_edges_by_direction(followers):
    def ends(direction):
        return sorted((e.srcID, e.dstID) for e in followers.edges(1, direction))

    assert ends(EdgeDir.NONE) == []
    assert ends(EdgeDir.IN) == [(3, 1), (4, 1)]
    assert ends(EdgeDir.OUT) == [(1, 0), (1, 2)]
    assert ends(EdgeDir.ALL) == [(1, 0), (1, 2), (3, 1), (4, 1)]


def test_edge_endpoints(mutualFollow):
    edge = next(mutualFollow.outEdges("A"))
    assert edge.source() == mutualFollow.vertex("A")
    assert edge.target().id == "B"


def test_unknown_vertex(mutualFollow):
    with pytest.raises(KeyError):
        mutualFollow.vertex("Z")


def test_writer_records():
    writer = TunkRankWriter()
    graph = Graph()
    graph.addVertex(7, data=1.0525)
    assert writer.saveVertex(graph.vertex(7)) == "7\t1.0525\n"
    assert writer.saveEdge(None) == ""


def test_save_writes_one_line_per_vertex(mutualFollow, tmp_path):
    mutualFollow.vertex("A").data = 1.0525
    path = mutualFollow.save(str(tmp_path / "out" / "scores"), TunkRankWriter(), saveEdges=True)
    assert path.name == "scores_1_of_1"
    assert path.read_text().splitlines() == ["A\t1.0525", "B\t1.0"]


def test_save_gzip(mutualFollow, tmp_path):
    path = mutualFollow.save(str(tmp_path / "scores"), TunkRankWriter(), gzip=True)
    assert path.name == "scores_1_of_1.gz"
    with gzip.open(path, mode="rt") as f:
        assert f.read() == "A\t1.0\nB\t1.0\n"


def test_top_k(followers):
    for vertex in followers.vertices():
        vertex.data = float(vertex.id)
    assert topK(followers, 2) == [(5, 5.0), (4, 4.0)]
    assert len(topK(followers, 100)) == followers.numVertices()
