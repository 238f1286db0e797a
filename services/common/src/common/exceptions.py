"""
Unified exception hierarchy for the evaluation services.

Engine errors describe a single failed evaluation and never affect other
jobs. Pool errors describe admission and lifecycle problems seen by the
caller of ``WorkerPool.submit``.
"""

from __future__ import annotations


class EvalPoolError(Exception):
    """Base exception for all evaluation service errors."""


# =============================================================================
# Engine Exceptions
# =============================================================================


class EngineError(EvalPoolError):
    """Base exception for engine-related errors."""


class EngineSpawnError(EngineError):
    """Engine process could not be started."""


class EngineProtocolError(EngineError):
    """Engine output ended or broke before the expected reply."""


class EngineTimeoutError(EngineError):
    """Engine invocation ran past its deadline and was killed."""


class EngineCancelledError(EngineError):
    """Evaluation was cancelled by its caller and the engine was killed."""


# =============================================================================
# Pool Exceptions
# =============================================================================


class PoolError(EvalPoolError):
    """Base exception for worker pool errors."""


class QueueFullError(PoolError):
    """No admission slot available; the caller should retry later."""


class EvaluationTimeoutError(PoolError):
    """No result arrived within the job timeout."""


class PoolShutdownError(PoolError):
    """Pool is not started or is shutting down."""


# =============================================================================
# Request Exceptions
# =============================================================================


class InvalidFenError(EvalPoolError):
    """Invalid FEN position provided."""
