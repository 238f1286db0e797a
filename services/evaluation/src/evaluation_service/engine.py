"""
UCI engine adapter.

Each evaluation spawns a fresh engine process, drives it through a minimal
UCI handshake and a fixed-time search, and parses its output into a best
move and ranked principal variations. The process never outlives the call.
"""

from __future__ import annotations

import contextlib
import functools
import logging
import subprocess
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Protocol

# Import exceptions from common package
from common import (
    EngineCancelledError,
    EngineError,
    EngineProtocolError,
    EngineSpawnError,
    EngineTimeoutError,
)

from .config import EngineConfig

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# Re-export for convenience
__all__ = [
    "EngineError",
    "EngineSpawnError",
    "EngineProtocolError",
    "EngineTimeoutError",
    "EngineCancelledError",
    "PvLine",
    "EvaluationResult",
    "CancelToken",
    "Evaluator",
    "EngineProcess",
    "UciEngine",
]

# Kill reasons recorded on an EngineProcess
KILL_TIMEOUT = "timeout"
KILL_CANCELLED = "cancelled"


@dataclass
class PvLine:
    """One ranked principal variation."""

    rank: int = 1  # MultiPV rank, 1 is best
    depth: int = 0  # Search depth reached
    cp: int = 0  # Centipawns from side to move (0 if mate)
    mate: int = 0  # Mate in N moves (0 if not mate)
    moves: list[str] = field(default_factory=list)  # Line in UCI notation


@dataclass
class EvaluationResult:
    """Outcome of one evaluation job.

    ``error`` is None on success. Failed evaluations carry the exception
    that ended them and no moves.
    """

    best_move: str | None = None
    ponder: str | None = None
    lines: list[PvLine] = field(default_factory=list)  # Best rank first
    error: Exception | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None


class CancelToken:
    """One-shot, thread-safe cancellation signal.

    Callbacks registered before ``cancel`` run once when it is called;
    callbacks registered afterwards run immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback and return a function that unregisters it."""
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return functools.partial(self._unregister, callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock, contextlib.suppress(ValueError):
            self._callbacks.remove(callback)


class Evaluator(Protocol):
    """Anything the worker pool can delegate an evaluation to."""

    def evaluate(self, fen: str, cancel: CancelToken | None = None) -> EvaluationResult: ...


class EngineProcess:
    """
    One engine subprocess, scoped to a single evaluation.

    Spawned on ``__enter__``; on ``__exit__`` its stdin is closed and the
    process is killed and reaped, whatever happened in between. ``kill`` may
    be called from other threads (watchdog, cancellation) and makes any
    blocked read return end-of-output.
    """

    def __init__(self, config: EngineConfig) -> None:
        self._config = config
        self._process: subprocess.Popen[str] | None = None
        self._lock = threading.Lock()
        self._kill_reason: str | None = None
        self._closed = False

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        """Exit status once reaped, None while running or never spawned."""
        return self._process.returncode if self._process is not None else None

    @property
    def kill_reason(self) -> str | None:
        return self._kill_reason

    def __enter__(self) -> EngineProcess:
        self.spawn()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def spawn(self) -> None:
        """Start the engine process.

        Raises:
            EngineSpawnError: If the binary cannot be executed.
        """
        path = self._config.engine_path
        logger.debug(f"Spawning engine {path}")
        try:
            self._process = subprocess.Popen(
                [str(path)],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise EngineSpawnError(f"Failed to start engine at {path}: {e}") from e

    def send(self, command: str) -> None:
        """Send one command line to the engine."""
        if self._process is None or self._process.stdin is None:
            raise EngineProtocolError("Engine not started")
        try:
            self._process.stdin.write(command + "\n")
            self._process.stdin.flush()
        except (OSError, ValueError) as e:
            raise self.failure(f"Failed to send {command!r}: {e}") from e
        logger.debug(f"Sent: {command}")

    def read_lines(self) -> Iterator[str]:
        """Yield non-empty output lines until the engine's stdout closes."""
        if self._process is None or self._process.stdout is None:
            raise EngineProtocolError("Engine not started")
        for raw in iter(self._process.stdout.readline, ""):
            line = raw.strip()
            if line:
                logger.debug(f"Recv: {line}")
                yield line

    def read_until(self, terminator: str) -> list[str]:
        """Read lines up to and including ``terminator``."""
        seen: list[str] = []
        for line in self.read_lines():
            seen.append(line)
            if line == terminator:
                return seen
        raise self.failure(f"Engine output ended before {terminator}")

    def failure(self, message: str) -> EngineError:
        """Build the error for a broken session, honouring any kill reason."""
        if self._kill_reason == KILL_TIMEOUT:
            return EngineTimeoutError(
                f"{message} (killed after {self._config.invocation_timeout}s)"
            )
        if self._kill_reason == KILL_CANCELLED:
            return EngineCancelledError(f"{message} (evaluation cancelled)")
        return EngineProtocolError(message)

    def kill(self, reason: str) -> None:
        """Kill the process from any thread; the first reason given wins."""
        with self._lock:
            if self._process is None or self._process.poll() is not None:
                return
            if self._kill_reason is None:
                self._kill_reason = reason
            logger.warning(f"Killing engine pid {self._process.pid}: {reason}")
            with contextlib.suppress(ProcessLookupError):
                self._process.kill()

    def close(self) -> None:
        """Close stdin, kill and reap the process. Safe to call twice."""
        if self._closed or self._process is None:
            return
        self._closed = True
        process = self._process

        if process.stdin is not None:
            with contextlib.suppress(OSError):
                process.stdin.close()

        with self._lock:
            if process.poll() is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()

        try:
            process.wait(timeout=self._config.terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Engine pid {process.pid} still running after kill")

        if process.stdout is not None:
            process.stdout.close()
        logger.debug(f"Engine pid {process.pid} exited with {process.returncode}")


class UciEngine:
    """
    Stateless UCI evaluator: one new engine process per call.

    Safe to share between threads since no process outlives ``evaluate``.

    Usage:
        engine = UciEngine(EngineConfig(movetime_ms=200, multipv=3))
        result = engine.evaluate("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")
        print(result.best_move, result.lines[0].cp)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        """Initialize the adapter.

        Args:
            config: Engine configuration. Uses defaults if not provided.
        """
        self._config = config or EngineConfig()
        self._version: str | None = None

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def path(self) -> Path:
        """Get the engine binary path."""
        return self._config.engine_path

    @property
    def version(self) -> str:
        """Engine name reported by the most recent handshake."""
        return self._version or "unknown"

    def evaluate(self, fen: str, cancel: CancelToken | None = None) -> EvaluationResult:
        """Evaluate a position with a fixed movetime search.

        Args:
            fen: Position in FEN notation. Not checked for legality.
            cancel: Optional token; cancelling it kills the engine.

        Returns:
            EvaluationResult with best move, ponder move and ranked lines.

        Raises:
            EngineSpawnError: If the engine cannot be started.
            EngineProtocolError: If output ends before ``bestmove``.
            EngineTimeoutError: If the invocation exceeds its deadline.
            EngineCancelledError: If ``cancel`` fired during the run.
        """
        position = fen.strip()

        with EngineProcess(self._config) as process:
            watchdog = threading.Timer(
                self._config.invocation_timeout, process.kill, args=(KILL_TIMEOUT,)
            )
            watchdog.daemon = True
            watchdog.start()
            unregister = (
                cancel.register(functools.partial(process.kill, KILL_CANCELLED))
                if cancel is not None
                else None
            )
            try:
                return self._run(process, position)
            finally:
                watchdog.cancel()
                if unregister is not None:
                    unregister()

    def _run(self, process: EngineProcess, position: str) -> EvaluationResult:
        from .uci_parser import SearchParser, format_result

        process.send("uci")
        for line in process.read_until("uciok"):
            if line.startswith("id name "):
                self._version = line[8:].strip()

        process.send(f"setoption name Threads value {self._config.threads}")
        process.send(f"setoption name Hash value {self._config.hash_mb}")
        process.send("setoption name Ponder value false")
        process.send(f"setoption name MultiPV value {self._config.multipv}")
        process.send("isready")
        process.read_until("readyok")

        process.send(f"position fen {position}")
        process.send(f"go movetime {self._config.movetime_ms}")

        parser = SearchParser(
            multipv=self._config.multipv, max_moves=self._config.max_pv_moves
        )
        for line in process.read_lines():
            if parser.feed(line):
                break
        else:
            raise process.failure("Engine output ended before bestmove")

        result = parser.result()
        logger.debug(f"Evaluated {position}: {format_result(result)}")
        return result
