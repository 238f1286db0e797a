"""
gRPC error handling utilities.

Provides a decorator and a mapping function that convert service exceptions
to gRPC status codes, so servicer methods raise instead of aborting by hand.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

import grpc
from google.protobuf.message import Message

from .exceptions import (
    EngineError,
    EngineSpawnError,
    EngineTimeoutError,
    EvaluationTimeoutError,
    InvalidFenError,
    PoolShutdownError,
    QueueFullError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# Exception to gRPC status mapping
EXCEPTION_STATUS_MAP: list[tuple[type[Exception], grpc.StatusCode, str]] = [
    # Argument errors
    (InvalidFenError, grpc.StatusCode.INVALID_ARGUMENT, "Invalid FEN"),
    # Backpressure
    (QueueFullError, grpc.StatusCode.RESOURCE_EXHAUSTED, "Queue full"),
    # Unavailable errors
    (PoolShutdownError, grpc.StatusCode.UNAVAILABLE, "Pool shutdown"),
    (EngineSpawnError, grpc.StatusCode.UNAVAILABLE, "Engine unavailable"),
    # Timeout errors
    (EvaluationTimeoutError, grpc.StatusCode.DEADLINE_EXCEEDED, "Evaluation timeout"),
    (EngineTimeoutError, grpc.StatusCode.DEADLINE_EXCEEDED, "Engine timeout"),
    # Internal errors (order matters - base classes last)
    (EngineError, grpc.StatusCode.INTERNAL, "Engine error"),
]


def map_exception_to_grpc_status(
    exc: Exception,
) -> tuple[grpc.StatusCode, str]:
    """Map an exception to its corresponding gRPC status code and message.

    Args:
        exc: The exception to map.

    Returns:
        Tuple of (status_code, log_prefix).
    """
    for exc_type, status, prefix in EXCEPTION_STATUS_MAP:
        if isinstance(exc, exc_type):
            return status, prefix
    return grpc.StatusCode.INTERNAL, "Internal error"


def abort_with_status(context: grpc.ServicerContext, exc: Exception) -> None:
    """Log ``exc`` and abort the RPC with its mapped status.

    INTERNAL faults are logged with a traceback, other statuses as warnings.
    """
    status, prefix = map_exception_to_grpc_status(exc)
    if status == grpc.StatusCode.INTERNAL:
        logger.exception(f"{prefix}: {exc}")
    else:
        logger.warning(f"{prefix}: {exc} ({status.name})")
    context.abort(status, str(exc))


def grpc_error_handler(
    default_response: Callable[[], Message] | None = None,
) -> Callable[[F], F]:
    """Decorator turning exceptions raised by a servicer method into gRPC statuses.

    Args:
        default_response: Response message class (or factory) returned when
                         ``context.abort`` does not raise, as with a mocked
                         context. Without it the wrapper returns None.

    Example:
        @grpc_error_handler(default_response=EvaluateResponse)
        def Evaluate(self, request, context):
            return build_evaluate_response(self._pool.submit(request.fen))
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(
            self: Any, request: Message, context: grpc.ServicerContext
        ) -> Message | None:
            try:
                return func(self, request, context)
            except Exception as e:
                abort_with_status(context, e)
            return default_response() if default_response is not None else None

        return wrapper  # type: ignore[return-value]

    return decorator
