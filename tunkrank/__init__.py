from tunkrank.config import EngineType, ExecutionMode, TunkRankConfig
from tunkrank.engine import Context, Engine
from tunkrank.graph import EdgeHandle, Graph, VertexHandle
from tunkrank.program import EdgeDir, TunkRank, VertexProgram, initVertex
from tunkrank.writer import TunkRankWriter, topK

__version__ = "0.1.0"
