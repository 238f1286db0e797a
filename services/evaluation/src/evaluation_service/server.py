"""
Evaluation gRPC Server

Exposes the worker pool to callers: ``Evaluate`` submits one position and
``HealthCheck`` reports pool load.
"""

from __future__ import annotations

import logging
import os
from concurrent import futures

import chess
import grpc

from common import GracefulServer, InvalidFenError, grpc_error_handler

from .config import EngineConfig, PoolConfig, ServerConfig
from .engine import EvaluationResult
from .generated import (
    BestMove,
    EvaluateRequest,
    EvaluateResponse,
    EvaluationServiceServicer,
    HealthCheckRequest,
    HealthCheckResponse,
    add_EvaluationServiceServicer_to_server,
)
from .generated import PvLine as PvLineMessage
from .pool import WorkerPool

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def validate_fen(fen: str) -> str:
    """Check FEN syntax before a job takes a pool slot.

    Only the notation is checked; whether the position is reachable or
    legal is left to the engine.

    Raises:
        InvalidFenError: If ``fen`` is missing or malformed.
    """
    if not fen or not fen.strip():
        raise InvalidFenError("Missing FEN")
    fen = fen.strip()
    try:
        chess.Board(fen)
    except ValueError as e:
        raise InvalidFenError(f"Invalid FEN: {fen}") from e
    return fen


class EvaluationServiceImpl(EvaluationServiceServicer):
    """gRPC service implementation backed by a WorkerPool."""

    def __init__(self, pool: WorkerPool) -> None:
        """Initialize the service with a worker pool.

        Args:
            pool: Worker pool to submit evaluations to.
        """
        self._pool = pool

    @grpc_error_handler(default_response=EvaluateResponse)
    def Evaluate(
        self,
        request: EvaluateRequest,
        context: grpc.ServicerContext,
    ) -> EvaluateResponse:
        """Evaluate a chess position.

        Args:
            request: The evaluation request with the position's FEN.
            context: gRPC service context.

        Returns:
            EvaluateResponse with the best move and ranked lines.
        """
        fen = validate_fen(request.fen)
        logger.debug(f"Evaluate request: fen={fen}")

        result = self._pool.submit(fen)
        return build_evaluate_response(result)

    def HealthCheck(
        self,
        request: HealthCheckRequest,
        context: grpc.ServicerContext,
    ) -> HealthCheckResponse:
        """Health check endpoint.

        Args:
            request: Empty health check request.
            context: gRPC service context.

        Returns:
            HealthCheckResponse with liveness, engine version and current load.
        """
        stats = self._pool.stats()

        return HealthCheckResponse(
            healthy=self._pool.is_started and stats["alive"] > 0,
            version=self._pool.version,
            workers=stats["workers"],
            queued=stats["queued"],
            in_flight=stats["in_flight"],
        )


def build_evaluate_response(result: EvaluationResult) -> EvaluateResponse:
    """Convert a successful EvaluationResult to its wire message.

    A missing best or ponder move is sent as an empty string.
    """
    response = EvaluateResponse(
        best=BestMove(bestmove=result.best_move or "", ponder=result.ponder or ""),
    )
    for line in result.lines:
        response.lines.append(
            PvLineMessage(
                rank=line.rank,
                depth=line.depth,
                cp=line.cp,
                mate=line.mate,
                moves=line.moves,
            )
        )
    return response


def create_server(
    server_config: ServerConfig | None = None,
    pool_config: PoolConfig | None = None,
    engine_config: EngineConfig | None = None,
) -> tuple[grpc.Server, WorkerPool]:
    """Create and configure the gRPC server with its worker pool.

    Args:
        server_config: Server configuration.
        pool_config: Pool configuration.
        engine_config: Engine configuration.

    Returns:
        Tuple of (server, pool). Caller should start pool, then server.
    """
    server_config = server_config or ServerConfig()

    pool = WorkerPool(pool_config, engine_config)

    server = grpc.server(
        futures.ThreadPoolExecutor(max_workers=server_config.max_workers),
        maximum_concurrent_rpcs=server_config.max_concurrent_rpcs,
    )
    add_EvaluationServiceServicer_to_server(EvaluationServiceImpl(pool), server)
    server.add_insecure_port(f"[::]:{server_config.port}")

    return server, pool


def serve(
    server_config: ServerConfig | None = None,
    pool_config: PoolConfig | None = None,
    engine_config: EngineConfig | None = None,
) -> None:
    """Start the evaluation gRPC server (blocking).

    Args:
        server_config: Server configuration.
        pool_config: Pool configuration.
        engine_config: Engine configuration.
    """
    server_config = server_config or ServerConfig()

    server, pool = create_server(server_config, pool_config, engine_config)

    pool.start()

    graceful = GracefulServer(server, on_shutdown=pool.shutdown)
    graceful.start()

    logger.info(f"Evaluation gRPC server started on port {server_config.port}")

    graceful.wait()


if __name__ == "__main__":
    port = int(os.environ.get("EVAL_PORT", os.environ.get("GRPC_PORT", "50051")))
    serve(ServerConfig(port=port))
