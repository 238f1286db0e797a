"""Pytest configuration for evaluation service tests."""

from __future__ import annotations

import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from pathlib import Path

import pytest

# Add the src directories to the Python path
services_path = Path(__file__).parent.parent.parent
sys.path.insert(0, str(services_path / "evaluation" / "src"))
sys.path.insert(0, str(services_path / "common" / "src"))

from evaluation_service.config import EngineConfig, PoolConfig  # noqa: E402
from evaluation_service.engine import (  # noqa: E402
    CancelToken,
    EngineCancelledError,
    EvaluationResult,
    PvLine,
)

# Sample FEN positions for testing
STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
MATE_IN_1_FEN = "6k1/5ppp/8/8/8/8/8/4R2K w - - 0 1"  # Re1-e8#
COMPLEX_FEN = "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"

SAMPLE_TRANSCRIPT = [
    "info depth 1 seldepth 1 multipv 1 score cp 20 nodes 20 pv e2e4",
    "info depth 12 seldepth 16 multipv 2 score cp 35 nodes 51234 nps 900000 pv e2e4 e7e5",
    "info depth 12 seldepth 15 multipv 1 score cp 50 nodes 51234 nps 900000 pv d2d4 d7d5",
    "bestmove d2d4 ponder d7d5",
]

# Minimal UCI engine. Logs every command it receives and replays TRANSCRIPT
# after "go". MODE "eof" exits instead of sending bestmove, "hang" stops
# answering, "die_on_uci" exits before the handshake completes, "garbage"
# writes a line that is not valid UTF-8 before the transcript.
FAKE_ENGINE_SOURCE = """#!{python}
import sys
import time

TRANSCRIPT = {transcript!r}
MODE = {mode!r}
LOG = {log!r}


def emit(line):
    sys.stdout.write(line + "\\n")
    sys.stdout.flush()


with open(LOG, "a") as log:
    for command in sys.stdin:
        command = command.strip()
        log.write(command + "\\n")
        log.flush()
        if command == "uci":
            if MODE == "die_on_uci":
                sys.exit(1)
            emit("id name FakeFish 1.0")
            emit("id author Test Suite")
            emit("option name Hash type spin default 16 min 1 max 1024")
            emit("uciok")
        elif command == "isready":
            emit("readyok")
        elif command.startswith("go"):
            if MODE == "garbage":
                sys.stdout.buffer.write(b"info string \\xff\\xfe bad bytes\\n")
                sys.stdout.buffer.flush()
            for line in TRANSCRIPT:
                emit(line)
            if MODE == "eof":
                sys.exit(0)
            if MODE == "hang":
                time.sleep(60)
        elif command == "quit":
            break
"""


@dataclass
class FakeEngine:
    """A generated fake engine script and the log of commands it received."""

    path: Path
    log: Path

    def commands(self) -> list[str]:
        if not self.log.exists():
            return []
        return self.log.read_text().splitlines()


@pytest.fixture
def starting_fen() -> str:
    return STARTING_FEN


@pytest.fixture
def mate_in_1_fen() -> str:
    return MATE_IN_1_FEN


@pytest.fixture
def complex_fen() -> str:
    return COMPLEX_FEN


@pytest.fixture
def sample_transcript() -> list[str]:
    return list(SAMPLE_TRANSCRIPT)


@pytest.fixture
def make_fake_engine(tmp_path: Path):
    """Factory writing an executable fake UCI engine into tmp_path."""
    counter = 0

    def make(transcript: list[str] | None = None, mode: str = "normal") -> FakeEngine:
        nonlocal counter
        counter += 1
        script = tmp_path / f"fake_engine_{counter}.py"
        log = tmp_path / f"fake_engine_{counter}.log"
        script.write_text(
            FAKE_ENGINE_SOURCE.format(
                python=sys.executable,
                transcript=list(SAMPLE_TRANSCRIPT if transcript is None else transcript),
                mode=mode,
                log=str(log),
            )
        )
        script.chmod(0o755)
        return FakeEngine(path=script, log=log)

    return make


@pytest.fixture
def fake_engine(make_fake_engine) -> FakeEngine:
    return make_fake_engine()


@pytest.fixture
def engine_config(fake_engine: FakeEngine) -> EngineConfig:
    """Engine configuration pointing at the fake engine."""
    return EngineConfig(
        engine_path=fake_engine.path,
        threads=1,
        hash_mb=16,
        multipv=3,
        movetime_ms=50,
        invocation_timeout=10.0,
    )


@pytest.fixture
def pool_config() -> PoolConfig:
    """Create a small test pool configuration."""
    return PoolConfig(worker_count=2, queue_size=2, job_timeout=5.0, shutdown_timeout=10.0)


@pytest.fixture
def spawned_processes(monkeypatch) -> list[subprocess.Popen]:
    """Record every process the engine adapter spawns."""
    processes: list[subprocess.Popen] = []
    real_popen = subprocess.Popen

    def recording_popen(*args, **kwargs):
        process = real_popen(*args, **kwargs)
        processes.append(process)
        return process

    monkeypatch.setattr(subprocess, "Popen", recording_popen)
    return processes


class StubEvaluator:
    """
    Deterministic in-process evaluator for pool tests.

    Results depend only on the FEN. Calls can be held on ``gate``, slowed
    per position via ``delays`` and made to fail via ``error``. A fired
    cancel token ends the wait early with EngineCancelledError.
    """

    version = "StubFish 1.0"

    def __init__(
        self,
        gate: threading.Event | None = None,
        delays: dict[str, float] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.gate = gate
        self.delays = delays or {}
        self.error = error
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def evaluate(self, fen: str, cancel: CancelToken | None = None) -> EvaluationResult:
        with self._lock:
            self.calls.append(fen)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            woken = threading.Event()
            if cancel is not None:
                cancel.register(woken.set)
            if self.gate is not None:
                while not self.gate.wait(0.01):
                    if woken.is_set():
                        break
            delay = self.delays.get(fen, 0.0)
            if delay:
                woken.wait(delay)
            if woken.is_set():
                raise EngineCancelledError("stub cancelled")
            if self.error is not None:
                raise self.error
            score = sum(ord(c) for c in fen) % 100
            return EvaluationResult(
                best_move="e2e4",
                ponder="e7e5",
                lines=[
                    PvLine(rank=1, depth=12, cp=score, moves=["e2e4", "e7e5"]),
                    PvLine(rank=2, depth=12, cp=score - 10, moves=["d2d4", "d7d5"]),
                ],
            )
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def stub_evaluator() -> StubEvaluator:
    return StubEvaluator()


def wait_for(predicate, timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
