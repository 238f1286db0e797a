"""
Unit tests for the UCI output parser.
"""

import pytest

from evaluation_service.engine import EngineProtocolError, EvaluationResult, PvLine
from evaluation_service.uci_parser import (
    SearchParser,
    format_result,
    parse_bestmove_line,
    parse_info_line,
    parse_transcript,
)


class TestParseInfoLine:
    """Tests for info line parsing."""

    def test_full_line(self) -> None:
        """All relevant fields are extracted."""
        line = (
            "info depth 18 seldepth 24 multipv 2 score cp -35 nodes 912345 "
            "nps 1500000 hashfull 12 tbhits 0 time 608 pv e7e5 g1f3 b8c6"
        )
        pv = parse_info_line(line)

        assert pv == PvLine(rank=2, depth=18, cp=-35, mate=0, moves=["e7e5", "g1f3", "b8c6"])

    def test_rank_defaults_to_one(self) -> None:
        """Lines without multipv are rank 1."""
        pv = parse_info_line("info depth 5 score cp 12 pv e2e4 e7e5")

        assert pv is not None
        assert pv.rank == 1

    def test_mate_score(self) -> None:
        """Mate scores populate mate and zero cp."""
        pv = parse_info_line("info depth 10 multipv 1 score mate -3 pv e1e8 g8h7")

        assert pv is not None
        assert pv.mate == -3
        assert pv.cp == 0

    def test_bound_score(self) -> None:
        """Lowerbound/upperbound markers after the score are ignored."""
        pv = parse_info_line("info depth 9 score cp 41 lowerbound nodes 300 pv g1f3")

        assert pv is not None
        assert pv.cp == 41
        assert pv.moves == ["g1f3"]

    def test_moves_truncated(self) -> None:
        """PV moves beyond max_moves are dropped."""
        moves = ["e2e4", "e7e5", "g1f3", "b8c6", "f1b5", "a7a6"]
        pv = parse_info_line(f"info depth 20 score cp 30 pv {' '.join(moves)}", max_moves=4)

        assert pv is not None
        assert pv.moves == moves[:4]

    def test_line_without_pv(self) -> None:
        """Progress lines without a pv are skipped."""
        assert parse_info_line("info depth 12 currmove e2e4 currmovenumber 1") is None

    def test_info_string(self) -> None:
        """info string lines are skipped even when they mention pv."""
        assert parse_info_line("info string NNUE evaluation using nn.nnue pv enabled") is None

    def test_non_info_line(self) -> None:
        """Other output is not parsed as an info line."""
        assert parse_info_line("bestmove e2e4 ponder e7e5") is None
        assert parse_info_line("readyok") is None
        assert parse_info_line("") is None

    def test_junk_numbers_keep_defaults(self) -> None:
        """Unparseable numbers fall back to defaults."""
        pv = parse_info_line("info depth x multipv y score cp z pv e2e4")

        assert pv == PvLine(rank=1, depth=0, cp=0, mate=0, moves=["e2e4"])

    def test_empty_pv(self) -> None:
        """A pv marker with no moves yields nothing."""
        assert parse_info_line("info depth 3 score cp 10 pv") is None


class TestParseBestmoveLine:
    """Tests for bestmove line parsing."""

    def test_with_ponder(self) -> None:
        assert parse_bestmove_line("bestmove d2d4 ponder d7d5") == ("d2d4", "d7d5")

    def test_without_ponder(self) -> None:
        assert parse_bestmove_line("bestmove e2e4") == ("e2e4", None)

    def test_no_legal_move(self) -> None:
        """(none) means there is no move to play."""
        assert parse_bestmove_line("bestmove (none)") == (None, None)

    def test_not_bestmove(self) -> None:
        assert parse_bestmove_line("info depth 1 pv e2e4") is None


class TestSearchParser:
    """Tests for the incremental search parser."""

    def test_ranked_transcript(self, sample_transcript: list[str]) -> None:
        """Lines are ordered by rank regardless of arrival order."""
        result = parse_transcript(sample_transcript, multipv=3)

        assert result.best_move == "d2d4"
        assert result.ponder == "d7d5"
        assert result.lines == [
            PvLine(rank=1, depth=12, cp=50, mate=0, moves=["d2d4", "d7d5"]),
            PvLine(rank=2, depth=12, cp=35, mate=0, moves=["e2e4", "e7e5"]),
        ]
        assert result.ok

    def test_minimal_transcript(self) -> None:
        """The two-line transcript from the protocol description."""
        result = parse_transcript(
            [
                "info depth 10 multipv 2 score cp 35 pv e2e4 e7e5",
                "info depth 10 multipv 1 score cp 50 pv d2d4 d7d5",
                "bestmove d2d4 ponder d7d5",
            ],
            multipv=3,
        )

        assert result.best_move == "d2d4"
        assert result.ponder == "d7d5"
        assert [(line.rank, line.cp, line.moves) for line in result.lines] == [
            (1, 50, ["d2d4", "d7d5"]),
            (2, 35, ["e2e4", "e7e5"]),
        ]

    def test_deeper_line_supersedes(self) -> None:
        """Later info for the same rank replaces the earlier one."""
        parser = SearchParser(multipv=1)
        parser.feed("info depth 5 multipv 1 score cp 10 pv e2e4")
        parser.feed("info depth 15 multipv 1 score cp 28 pv g1f3 d7d5")
        parser.feed("bestmove g1f3")

        result = parser.result()
        assert result.lines == [PvLine(rank=1, depth=15, cp=28, moves=["g1f3", "d7d5"])]

    def test_truncated_to_multipv(self) -> None:
        """Ranks beyond the configured count are dropped."""
        parser = SearchParser(multipv=2)
        for rank in (1, 2, 3):
            parser.feed(f"info depth 8 multipv {rank} score cp {40 - rank} pv e2e4")
        parser.feed("bestmove e2e4")

        assert [line.rank for line in parser.result().lines] == [1, 2]

    def test_feed_reports_finish(self) -> None:
        """feed returns True from the bestmove line on."""
        parser = SearchParser()

        assert parser.feed("info depth 1 score cp 3 pv e2e4") is False
        assert parser.feed("bestmove e2e4") is True
        assert parser.finished
        assert parser.feed("info depth 2 score cp 99 pv d2d4") is True
        assert parser.result().lines[0].cp == 3

    def test_no_bestmove(self) -> None:
        """A transcript that ends without bestmove is a protocol error."""
        with pytest.raises(EngineProtocolError, match="bestmove"):
            parse_transcript(["info depth 3 score cp 10 pv e2e4"], multipv=1)

    def test_bestmove_without_info(self) -> None:
        """A bare bestmove still yields a result with no lines."""
        result = parse_transcript(["bestmove e2e4"], multipv=3)

        assert result.best_move == "e2e4"
        assert result.lines == []

    def test_lines_after_bestmove_ignored(self) -> None:
        """Output after bestmove does not change the result."""
        result = parse_transcript(
            ["bestmove e2e4", "info depth 30 score cp 500 pv a2a3"], multipv=1
        )

        assert result.lines == []


class TestFormatResult:
    """Tests for result formatting."""

    def test_format_success(self, sample_transcript: list[str]) -> None:
        text = format_result(parse_transcript(sample_transcript, multipv=3))

        assert "best=d2d4" in text
        assert "ponder=d7d5" in text
        assert "[1] d12 +50cp d2d4 d7d5" in text

    def test_format_mate(self) -> None:
        result = EvaluationResult(best_move="e1e8", lines=[PvLine(mate=1, moves=["e1e8"])])

        assert "#1" in format_result(result)

    def test_format_failure(self) -> None:
        result = EvaluationResult(error=EngineProtocolError("boom"))

        assert format_result(result) == "failed: boom"
