"""
Parser for UCI search output.

Handles the two line kinds a search produces that matter here:

    info depth 18 seldepth 24 multipv 2 score cp 35 nodes 912345 pv e2e4 e7e5
    bestmove d2d4 ponder d7d5

Info lines update the principal variation for their rank (later lines win);
the bestmove line ends the search.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from common import EngineProtocolError

from .engine import EvaluationResult, PvLine

logger = logging.getLogger(__name__)

INFO_MARKER = "info"
PV_MARKER = "pv"
BESTMOVE_MARKER = "bestmove"
PONDER_MARKER = "ponder"
NO_MOVE = "(none)"  # sent as bestmove when the side to move has no legal move


def parse_info_line(line: str, max_moves: int = 32) -> PvLine | None:
    """
    Parse an ``info`` line carrying a principal variation.

    Args:
        line: One line of engine output.
        max_moves: Maximum number of PV moves to keep.

    Returns:
        PvLine, or None if the line is not a PV-bearing info line.
    """
    tokens = line.split()
    if len(tokens) < 2 or tokens[0] != INFO_MARKER or tokens[1] == "string":
        return None
    if PV_MARKER not in tokens:
        return None

    pv = PvLine()
    i = 1
    while i < len(tokens):
        token = tokens[i]
        if token == PV_MARKER:
            pv.moves = tokens[i + 1 : i + 1 + max_moves]
            break
        if token == "string":
            # Free-form text runs to the end of the line
            break
        if token == "depth":
            pv.depth = _parse_int(_at(tokens, i + 1), pv.depth)
            i += 2
        elif token == "multipv":
            pv.rank = _parse_int(_at(tokens, i + 1), pv.rank)
            i += 2
        elif token == "score":
            kind = _at(tokens, i + 1)
            value = _parse_int(_at(tokens, i + 2), 0)
            if kind == "cp":
                pv.cp, pv.mate = value, 0
            elif kind == "mate":
                pv.cp, pv.mate = 0, value
            i += 3
        else:
            i += 1

    if not pv.moves:
        return None
    return pv


def parse_bestmove_line(line: str) -> tuple[str | None, str | None] | None:
    """
    Parse a ``bestmove`` line.

    Returns:
        (best_move, ponder) or None if the line is not a bestmove line.
        ``(none)`` is reported as a None best move.
    """
    tokens = line.split()
    if not tokens or tokens[0] != BESTMOVE_MARKER:
        return None

    best = tokens[1] if len(tokens) >= 2 else None
    if best == NO_MOVE:
        best = None

    ponder = None
    if len(tokens) >= 4 and tokens[2] == PONDER_MARKER:
        ponder = tokens[3]
    return best, ponder


class SearchParser:
    """
    Incremental parser for the output of one ``go`` command.

    Feed lines in order; ``feed`` returns True once the bestmove line has
    been seen, after which ``result`` is available.
    """

    def __init__(self, multipv: int = 1, max_moves: int = 32) -> None:
        self._multipv = multipv
        self._max_moves = max_moves
        self._lines: dict[int, PvLine] = {}
        self._best_move: str | None = None
        self._ponder: str | None = None
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, line: str) -> bool:
        if self._finished:
            return True

        best = parse_bestmove_line(line)
        if best is not None:
            self._best_move, self._ponder = best
            self._finished = True
            return True

        pv = parse_info_line(line, self._max_moves)
        if pv is not None:
            self._lines[pv.rank] = pv
        return False

    def result(self) -> EvaluationResult:
        """Build the result from everything fed so far.

        Raises:
            EngineProtocolError: If no bestmove line was fed.
        """
        if not self._finished:
            raise EngineProtocolError("Engine output ended before bestmove")

        ranked = [self._lines[rank] for rank in sorted(self._lines)]
        return EvaluationResult(
            best_move=self._best_move,
            ponder=self._ponder,
            lines=ranked[: self._multipv],
        )


def parse_transcript(
    lines: Iterable[str], multipv: int = 1, max_moves: int = 32
) -> EvaluationResult:
    """Parse a complete search transcript into an EvaluationResult."""
    parser = SearchParser(multipv=multipv, max_moves=max_moves)
    for line in lines:
        if parser.feed(line.strip()):
            break
    return parser.result()


def format_result(result: EvaluationResult) -> str:
    """
    Format an evaluation result as a single human-readable line.

    Useful for debugging and logging.
    """
    if not result.ok:
        return f"failed: {result.error}"
    parts = [f"best={result.best_move or NO_MOVE}"]
    if result.ponder:
        parts.append(f"ponder={result.ponder}")
    for line in result.lines:
        score = f"#{line.mate}" if line.mate else f"{line.cp:+d}cp"
        parts.append(f"[{line.rank}] d{line.depth} {score} {' '.join(line.moves[:5])}")
    return " ".join(parts)


def _at(tokens: list[str], index: int) -> str | None:
    return tokens[index] if index < len(tokens) else None


def _parse_int(value: str | None, default: int) -> int:
    """Parse an integer token, keeping ``default`` on junk."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.debug(f"Ignoring non-integer token: {value}")
        return default
