"""
Best-effort position -> result memo shared by all workers.

Locking discipline: every read and write of the underlying map happens
under a single ``threading.Lock``, held only for the dictionary operation.
A miss never waits on another job; concurrent misses for the same
position each run their own evaluation and the last one stored wins.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from .engine import EvaluationResult

logger = logging.getLogger(__name__)


class ResultMemo:
    """Bounded LRU map from FEN to a successful EvaluationResult.

    Stored results are handed out as-is; callers treat them as read-only.
    """

    def __init__(self, max_entries: int) -> None:
        self._max_entries = max_entries
        self._entries: OrderedDict[str, EvaluationResult] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, fen: str) -> EvaluationResult | None:
        key = fen.strip()
        with self._lock:
            result = self._entries.get(key)
            if result is not None:
                self._entries.move_to_end(key)
            return result

    def put(self, fen: str, result: EvaluationResult) -> None:
        """Store a successful result; failed results are ignored."""
        if not result.ok or self._max_entries <= 0:
            return
        key = fen.strip()
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Memo evicted {evicted}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
