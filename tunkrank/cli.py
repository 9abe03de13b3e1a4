import argparse
import logging
import sys
from pprint import pprint
from typing import Optional

from tunkrank.config import EngineType, TunkRankConfig
from tunkrank.engine import Engine
from tunkrank.graph import Graph
from tunkrank.loader import FORMATS, loadFormat, loadSyntheticPowerlaw
from tunkrank.program import initVertex
from tunkrank.writer import TunkRankWriter, topK

logger = logging.getLogger(__name__)


def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tunkrank", description="TunkRank algorithm.")
    parser.add_argument(
        "graph",
        nargs="?",
        help="The graph file or directory. Either a graph or --powerlaw must be given.",
    )
    parser.add_argument("--graph", dest="graphOption", help=argparse.SUPPRESS)
    parser.add_argument("--format", default="adj", choices=FORMATS, help="The graph file format")
    parser.add_argument(
        "--engine",
        default=EngineType.SYNCHRONOUS.value,
        choices=[t.value for t in EngineType],
        help="The engine type synchronous or asynchronous",
    )
    parser.add_argument(
        "--tol", type=float, default=TunkRankConfig.TOLERANCE,
        help="The permissible change at convergence.",
    )
    parser.add_argument(
        "--retweet-prob", type=float, default=TunkRankConfig.RETWEET_PROB,
        help="Probability that a follower retweets.",
    )
    parser.add_argument(
        "--iterations", type=int, default=0,
        help="If set, forces the synchronous engine and runs complete (non-dynamic) "
        "TunkRank for a fixed number of iterations.",
    )
    parser.add_argument(
        "--powerlaw", type=int, default=0,
        help="Generate a synthetic powerlaw out-degree graph with this many vertices.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed of the synthetic graph.")
    parser.add_argument(
        "--saveprefix", default="",
        help="If set, saves the resulting scores to files with this prefix.",
    )
    parser.add_argument("--gzip", action="store_true", help="Compress the saved scores.")
    parser.add_argument("--topk", type=int, default=10, help="Number of top vertices to print.")
    parser.add_argument("--ncpus", type=int, default=1, help="Threads used to gather.")
    return parser


def run(args: argparse.Namespace) -> Graph:
    config = TunkRankConfig(args.retweet_prob, args.tol, args.iterations)
    graphPath = args.graph or args.graphOption

    graph = Graph()
    if args.powerlaw > 0:
        print("Loading synthetic Powerlaw graph.")
        loadSyntheticPowerlaw(graph, args.powerlaw, alpha=2.0, truncate=100000000, seed=args.seed)
    else:
        print(f"Loading graph in format: {args.format}")
        loadFormat(graph, graphPath, args.format)
    graph.finalize()
    print(f"#vertices: {graph.numVertices()} #edges: {graph.numEdges()}")

    graph.transformVertices(initVertex)

    engine = Engine.fromConfig(graph, config, EngineType(args.engine), args.ncpus)
    engine.signalAll()
    engine.start()
    print(f"Finished Running engine in {engine.elapsedSeconds():.3f} seconds.")

    if args.saveprefix:
        graph.save(args.saveprefix, TunkRankWriter(), gzip=args.gzip)
    if args.topk > 0:
        pprint(topK(graph, args.topk))
    return graph


def main(argv: Optional[list[str]] = None) -> int:
    parser = buildParser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.powerlaw <= 0 and not (args.graph or args.graphOption):
        print("graph or powerlaw option must be specified")
        parser.print_help()
        return 0
    try:
        run(args)
    except (ValueError, OSError) as e:
        sys.stderr.write(f"tunkrank: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
