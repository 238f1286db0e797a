"""
Evaluation gRPC Service

Evaluates chess positions on a bounded pool of workers, each driving a
fresh UCI engine process per job.
"""

from .config import EngineConfig, PoolConfig, ServerConfig
from .engine import (
    CancelToken,
    EngineCancelledError,
    EngineError,
    EngineProcess,
    EngineProtocolError,
    EngineSpawnError,
    EngineTimeoutError,
    EvaluationResult,
    PvLine,
    UciEngine,
)
from .memo import ResultMemo
from .pool import (
    EvaluationJob,
    EvaluationTimeoutError,
    PoolShutdownError,
    PoolStats,
    QueueFullError,
    WorkerPool,
)
from .server import EvaluationServiceImpl, create_server, serve
from .uci_parser import SearchParser, parse_bestmove_line, parse_info_line, parse_transcript

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Config
    "EngineConfig",
    "PoolConfig",
    "ServerConfig",
    # Engine
    "UciEngine",
    "EngineProcess",
    "CancelToken",
    "EvaluationResult",
    "PvLine",
    "EngineError",
    "EngineSpawnError",
    "EngineProtocolError",
    "EngineTimeoutError",
    "EngineCancelledError",
    # Parsing
    "SearchParser",
    "parse_info_line",
    "parse_bestmove_line",
    "parse_transcript",
    # Pool
    "WorkerPool",
    "EvaluationJob",
    "PoolStats",
    "ResultMemo",
    "QueueFullError",
    "EvaluationTimeoutError",
    "PoolShutdownError",
    # Server
    "EvaluationServiceImpl",
    "create_server",
    "serve",
]
