"""Shared utilities for the evaluation services."""

from .exceptions import (
    EngineCancelledError,
    EngineError,
    EngineProtocolError,
    EngineSpawnError,
    EngineTimeoutError,
    EvalPoolError,
    EvaluationTimeoutError,
    InvalidFenError,
    PoolError,
    PoolShutdownError,
    QueueFullError,
)
from .grpc_errors import abort_with_status, grpc_error_handler, map_exception_to_grpc_status
from .server import GracefulServer

__all__ = [
    # Exceptions
    "EvalPoolError",
    "EngineError",
    "EngineSpawnError",
    "EngineProtocolError",
    "EngineTimeoutError",
    "EngineCancelledError",
    "PoolError",
    "QueueFullError",
    "EvaluationTimeoutError",
    "PoolShutdownError",
    "InvalidFenError",
    # gRPC utilities
    "abort_with_status",
    "grpc_error_handler",
    "map_exception_to_grpc_status",
    # Server utilities
    "GracefulServer",
]
