"""
Configuration for the evaluation service.

All configuration can be set via environment variables with sensible defaults.
Values are fixed once the pool is constructed.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class EngineConfig:
    """Configuration for one engine invocation."""

    engine_path: Path = field(
        default_factory=lambda: Path(os.environ.get("STOCKFISH_PATH", "stockfish"))
    )
    threads: int = field(default_factory=lambda: int(os.environ.get("STOCKFISH_THREADS", "1")))
    hash_mb: int = field(default_factory=lambda: int(os.environ.get("STOCKFISH_HASH", "100")))
    multipv: int = field(default_factory=lambda: int(os.environ.get("STOCKFISH_MULTIPV", "3")))
    movetime_ms: int = field(
        default_factory=lambda: int(os.environ.get("STOCKFISH_MOVETIME_MS", "500"))
    )
    max_pv_moves: int = 32  # cap on moves kept per principal variation
    invocation_timeout: float = 10.0  # seconds before the watchdog kills the engine
    terminate_timeout: float = 2.0  # seconds to wait for the killed process to be reaped

    def __post_init__(self) -> None:
        if self.multipv < 1:
            raise ValueError(f"multipv must be >= 1, got {self.multipv}")
        if self.movetime_ms < 1:
            raise ValueError(f"movetime_ms must be >= 1, got {self.movetime_ms}")
        if self.max_pv_moves < 1:
            raise ValueError(f"max_pv_moves must be >= 1, got {self.max_pv_moves}")


@dataclass
class PoolConfig:
    """Configuration for the worker pool."""

    worker_count: int = field(default_factory=lambda: int(os.environ.get("EVAL_WORKERS", "4")))
    queue_size: int = field(
        default_factory=lambda: int(os.environ.get("EVAL_QUEUE_SIZE", "100"))
    )
    job_timeout: float = field(
        default_factory=lambda: float(os.environ.get("EVAL_JOB_TIMEOUT", "5.0"))
    )
    memo_size: int = field(default_factory=lambda: int(os.environ.get("EVAL_MEMO_SIZE", "0")))
    cancel_on_timeout: bool = True  # kill the engine once its caller has given up
    shutdown_timeout: float = 30.0  # seconds to wait for workers to drain

    def __post_init__(self) -> None:
        if self.worker_count < 1:
            raise ValueError(f"worker_count must be >= 1, got {self.worker_count}")
        if self.queue_size < 0:
            raise ValueError(f"queue_size must be >= 0, got {self.queue_size}")
        if self.job_timeout <= 0:
            raise ValueError(f"job_timeout must be > 0, got {self.job_timeout}")
        if self.memo_size < 0:
            raise ValueError(f"memo_size must be >= 0, got {self.memo_size}")


@dataclass
class ServerConfig:
    """Configuration for the gRPC server."""

    port: int = field(default_factory=lambda: int(os.environ.get("GRPC_PORT", "50051")))
    max_workers: int = 10
    max_concurrent_rpcs: int = 100
