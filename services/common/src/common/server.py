"""
Server lifecycle utilities for gRPC services.

A service process runs until SIGTERM or SIGINT. The signal only wakes the
main thread; the real work (draining workers, stopping the server) happens
there, outside the signal handler.
"""

from __future__ import annotations

import logging
import signal
import threading
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    import grpc

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class GracefulServer:
    """Run a gRPC server until a shutdown signal, then tear down in order.

    Shutdown order: run the ``on_shutdown`` hooks (e.g. ``WorkerPool.shutdown``,
    which fails new submissions and lets in-flight evaluations finish), then
    stop the server with a grace period for the remaining RPCs.

    Usage:
        server, pool = create_server(config)
        pool.start()

        graceful = GracefulServer(server, on_shutdown=pool.shutdown)
        graceful.start()
        graceful.wait()  # Blocks until SIGTERM/SIGINT or stop()
    """

    def __init__(
        self,
        server: grpc.Server,
        grace_period: float = 5.0,
        on_shutdown: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the graceful server wrapper.

        Args:
            server: The gRPC server instance.
            grace_period: Seconds to wait for in-flight RPCs during shutdown.
            on_shutdown: Optional hook run before the server is stopped.
        """
        self._server = server
        self._grace_period = grace_period
        self._hooks: list[Callable[[], None]] = []
        if on_shutdown is not None:
            self._hooks.append(on_shutdown)
        self._stop_requested = threading.Event()
        self._stopped = threading.Event()
        self._previous_handlers: dict[signal.Signals, Any] = {}

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    def add_shutdown_hook(self, hook: Callable[[], None]) -> None:
        """Add a hook; hooks run in registration order."""
        self._hooks.append(hook)

    def start(self) -> None:
        """Install signal handlers and start the server.

        Must be called from the main thread.
        """
        for sig in SHUTDOWN_SIGNALS:
            self._previous_handlers[sig] = signal.signal(sig, self._on_signal)
        self._server.start()

    def wait(self) -> None:
        """Block until shutdown is requested, then shut down."""
        try:
            self._stop_requested.wait()
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        self._shutdown()

    def stop(self) -> None:
        """Request shutdown without a signal (tests, embedding)."""
        self._stop_requested.set()

    def _on_signal(self, signum: int, frame: object) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, initiating graceful shutdown...")
        self._stop_requested.set()

    def _shutdown(self) -> None:
        if self._stopped.is_set():
            return
        logger.info("Shutting down...")

        for hook in self._hooks:
            try:
                hook()
            except Exception as e:
                logger.exception(f"Error in shutdown hook {hook!r}: {e}")

        self._server.stop(grace=self._grace_period).wait()

        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

        self._stopped.set()
        logger.info("Shutdown complete")
