import bisect
import itertools
import logging
import random
from pathlib import Path
from typing import Iterator, Optional

from tunkrank.graph import Graph

logger = logging.getLogger(__name__)

FORMATS = ("snap", "tsv", "adj")


def contentLines(path: Path) -> Iterator[tuple[int, str]]:
    """Yield (line number, stripped line) for every line that is not blank or a comment."""
    with path.open(mode="r") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if line.startswith("#") or line == "":
                continue
            yield lineno, line


def parseEdgeList(graph: Graph, path: Path) -> None:
    for lineno, line in contentLines(path):
        fields = line.split()
        if len(fields) != 2:
            raise ValueError(f"{path}:{lineno}: expected 'src dst', got {line!r}")
        try:
            src, dst = int(fields[0]), int(fields[1])
        except ValueError:
            raise ValueError(f"{path}:{lineno}: vertex ids must be integers, got {line!r}") from None
        graph.addEdge(src, dst)


def parseAdjacency(graph: Graph, path: Path) -> None:
    """Each line is `vid nneighbors n1 n2 ... nk`; the vertex follows n1..nk."""
    for lineno, line in contentLines(path):
        try:
            fields = [int(field) for field in line.split()]
        except ValueError:
            raise ValueError(f"{path}:{lineno}: vertex ids must be integers, got {line!r}") from None
        if len(fields) < 2 or len(fields) - 2 != fields[1]:
            raise ValueError(f"{path}:{lineno}: neighbor count does not match, got {line!r}")
        src = fields[0]
        if src not in graph:
            graph.addVertex(src)
        for dst in fields[2:]:
            graph.addEdge(src, dst)


def loadFormat(graph: Graph, path: str, format: str) -> None:
    """Load a file, or every file of a directory, in the given format into graph."""
    if format not in FORMATS:
        raise ValueError(f"unknown graph format {format!r}, expected one of {', '.join(FORMATS)}")
    path = Path(path)
    paths = sorted(p for p in path.iterdir() if p.is_file()) if path.is_dir() else [path]
    for p in paths:
        logger.info("loading %s in format %s", p, format)
        if format == "adj":
            parseAdjacency(graph, p)
        else:
            parseEdgeList(graph, p)


def loadSyntheticPowerlaw(
    graph: Graph,
    nverts: int,
    inDegree: bool = False,
    alpha: float = 2.1,
    truncate: Optional[int] = None,
    seed: Optional[int] = None,
) -> None:
    """
    Build a graph whose out-degree (or in-degree when inDegree is set) follows
    P(d) ~ d^-alpha for d in 1..min(truncate, nverts - 1). Neighbors are drawn
    uniformly, without self loops or duplicates.
    """
    if nverts < 2:
        raise ValueError(f"a synthetic graph needs at least 2 vertices, got {nverts}")
    rng = random.Random(seed)
    maxDegree = nverts - 1 if truncate is None else max(1, min(truncate, nverts - 1))
    cdf = [*itertools.accumulate(d ** -alpha for d in range(1, maxDegree + 1))]

    for vertexID in range(nverts):
        graph.addVertex(vertexID)
    numEdges = 0
    for vertexID in range(nverts):
        degree = bisect.bisect_left(cdf, rng.random() * cdf[-1]) + 1
        for neighbor in rng.sample(range(nverts - 1), min(degree, maxDegree)):
            # skip over vertexID itself
            if neighbor >= vertexID:
                neighbor += 1
            if inDegree:
                graph.addEdge(neighbor, vertexID)
            else:
                graph.addEdge(vertexID, neighbor)
            numEdges += 1
    logger.info("generated powerlaw graph with %d vertices and %d edges", nverts, numEdges)
