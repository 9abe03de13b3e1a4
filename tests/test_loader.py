import pytest

from tunkrank.graph import Graph
from tunkrank.loader import loadFormat, loadSyntheticPowerlaw


def edgeSet(graph):
    return sorted((src, dst) for src, dst in graph.nxGraph.edges())


def test_load_snap(tmp_path):
    path = tmp_path / "follows.txt"
    path.write_text("# FromNodeId ToNodeId\n1 2\n\n2   3\n3 1\n")
    graph = Graph()
    loadFormat(graph, str(path), "snap")
    assert edgeSet(graph) == [(1, 2), (2, 3), (3, 1)]


def test_load_tsv(tmp_path):
    path = tmp_path / "follows.tsv"
    path.write_text("1\t2\n1 3\n2 \t 3\n")
    graph = Graph()
    loadFormat(graph, str(path), "tsv")
    assert edgeSet(graph) == [(1, 2), (1, 3), (2, 3)]


def test_load_adjacency_keeps_vertices_without_edges(tmp_path):
    path = tmp_path / "follows.adj"
    path.write_text("1 2 2 3\n2 1 1\n4 0\n")
    graph = Graph()
    loadFormat(graph, str(path), "adj")
    assert edgeSet(graph) == [(1, 2), (1, 3), (2, 1)]
    assert sorted(graph.vertexIDs()) == [1, 2, 3, 4]


def test_load_directory(tmp_path):
    (tmp_path / "part-0").write_text("1 2\n")
    (tmp_path / "part-1").write_text("2 1\n")
    graph = Graph()
    loadFormat(graph, str(tmp_path), "snap")
    assert edgeSet(graph) == [(1, 2), (2, 1)]


@pytest.mark.parametrize(
    "format, content",
    [
        ("snap", "1 2 3\n"),
        ("snap", "a b\n"),
        ("tsv", "1\t2\t3\n"),
        ("adj", "1 3 2\n"),
        ("adj", "1 x\n"),
    ],
)
def test_malformed_lines(tmp_path, format, content):
    path = tmp_path / "graph"
    path.write_text("# header\n" + content)
    with pytest.raises(ValueError, match=":2:"):
        loadFormat(Graph(), str(path), format)


def test_unknown_format(tmp_path):
    with pytest.raises(ValueError, match="unknown graph format"):
        loadFormat(Graph(), str(tmp_path), "xml")


def test_missing_file(tmp_path):
    with pytest.raises(OSError):
        loadFormat(Graph(), str(tmp_path / "missing"), "snap")


def test_powerlaw_out_degrees():
    graph = Graph()
    loadSyntheticPowerlaw(graph, 100, truncate=20, seed=3)
    graph.finalize()
    assert graph.numVertices() == 100
    for vertex in graph.vertices():
        assert 1 <= vertex.numOutEdges() <= 20
        assert all(e.dstID != vertex.id for e in graph.outEdges(vertex.id))


def test_powerlaw_in_degrees():
    graph = Graph()
    loadSyntheticPowerlaw(graph, 50, inDegree=True, seed=3)
    graph.finalize()
    for vertex in graph.vertices():
        assert vertex.numInEdges() >= 1


def test_powerlaw_is_seeded():
    first, second = Graph(), Graph()
    loadSyntheticPowerlaw(first, 60, seed=11)
    loadSyntheticPowerlaw(second, 60, seed=11)
    assert edgeSet(first) == edgeSet(second)


def test_powerlaw_needs_two_vertices():
    with pytest.raises(ValueError):
        loadSyntheticPowerlaw(Graph(), 1)
