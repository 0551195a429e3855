"""Pytest tests for hanging piece detection.

Covers: the 1.e4 d5 2.exd5 scenario, defended pieces, discovered-check
captures, union over both colors, independence from the recorded
side to move and determinism on random positions.
"""

from __future__ import annotations

import random

import chess
import pytest

from hanging_pieces import board as adapter
from hanging_pieces.detector import find_hanging, hanging_squares, is_hanging
from hanging_pieces.generator import random_position
from hanging_pieces.models import TargetColor

EXD5_FEN = "rnbqkbnr/ppp1pppp/8/3P4/8/8/PPPP1PPP/RNBQKBNR b KQkq - 0 2"
ROOKS_FEN = "r3k3/8/8/8/R7/8/8/4K3 w - - 0 1"
DISCOVERY_FEN = "4k3/8/5n2/3p4/2P5/4N3/8/4R1K1 w - - 0 1"


def _after(*sans: str) -> str:
    board = chess.Board()
    for san in sans:
        board.push_san(san)
    return board.fen()


# ---------------------------------------------------------------------------
# Known positions
# ---------------------------------------------------------------------------


class TestKnownPositions:

    def test_starting_position_has_nothing_hanging(self):
        assert find_hanging(chess.STARTING_FEN, chess.WHITE) == []
        assert find_hanging(chess.STARTING_FEN, chess.BLACK) == []

    def test_exd5_fixture_matches_moves(self):
        assert _after("e4", "d5", "exd5") == EXD5_FEN

    def test_exd5_pawn_is_hanging(self):
        """Qxd5 cannot be answered: no White piece reaches d5."""
        assert chess.Move.from_uci("d8d5") in adapter.legal_moves(EXD5_FEN, chess.BLACK)
        assert find_hanging(EXD5_FEN, chess.WHITE) == [chess.D5]

    def test_exd5_black_has_nothing_hanging(self):
        assert find_hanging(EXD5_FEN, chess.BLACK) == []

    def test_defended_pawn_is_not_hanging(self):
        fen = _after("e4", "e5", "Nf3", "Nc6")
        assert is_hanging(fen, chess.E5) is False
        assert find_hanging(fen, chess.BLACK) == []
        assert find_hanging(fen, chess.WHITE) == []

    def test_unattacked_piece_is_not_hanging(self):
        assert is_hanging(ROOKS_FEN, chess.E1) is False
        assert is_hanging(ROOKS_FEN, chess.E8) is False

    def test_empty_square_is_not_hanging(self):
        assert is_hanging(EXD5_FEN, chess.E4) is False

    def test_mutually_attacking_rooks(self):
        assert find_hanging(ROOKS_FEN, chess.WHITE) == [chess.A4]
        assert find_hanging(ROOKS_FEN, chess.BLACK) == [chess.A8]


class TestAnyUnansweredCapture:
    """One capture without a recapture is enough to call a piece hanging."""

    def test_pawn_capture_can_be_answered(self):
        after = adapter.apply_move(
            adapter.force_turn(DISCOVERY_FEN, chess.WHITE),
            chess.Move.from_uci("c4d5"),
        )
        assert chess.Move.from_uci("f6d5") in adapter.legal_moves(after, chess.BLACK)

    def test_knight_capture_with_discovered_check_cannot(self):
        after = adapter.apply_move(
            adapter.force_turn(DISCOVERY_FEN, chess.WHITE),
            chess.Move.from_uci("e3d5"),
        )
        moves = adapter.legal_moves(after, chess.BLACK)
        assert not [m for m in moves if m.to_square == chess.D5]

    def test_piece_is_hanging(self):
        assert is_hanging(DISCOVERY_FEN, chess.D5) is True
        assert find_hanging(DISCOVERY_FEN, chess.BLACK) == [chess.D5]

    def test_attacking_pawn_is_defended(self):
        assert find_hanging(DISCOVERY_FEN, chess.WHITE) == []


# ---------------------------------------------------------------------------
# Target colors
# ---------------------------------------------------------------------------


class TestHangingSquares:

    def test_single_colors(self):
        assert hanging_squares(ROOKS_FEN, TargetColor.WHITE) == [chess.A4]
        assert hanging_squares(ROOKS_FEN, TargetColor.BLACK) == [chess.A8]

    def test_both_contains_one_of_each(self):
        assert hanging_squares(ROOKS_FEN, TargetColor.BOTH) == [chess.A4, chess.A8]

    def test_both_with_one_side_empty(self):
        assert hanging_squares(EXD5_FEN, TargetColor.BOTH) == [chess.D5]

    def test_target_colors(self):
        assert TargetColor.WHITE.colors == (chess.WHITE,)
        assert TargetColor.BLACK.colors == (chess.BLACK,)
        assert set(TargetColor.BOTH.colors) == {chess.WHITE, chess.BLACK}


# ---------------------------------------------------------------------------
# Properties over random positions
# ---------------------------------------------------------------------------


@pytest.mark.sweep
class TestProperties:

    def _positions(self, seeds: list[int]) -> list[str]:
        fens = []
        for seed in seeds:
            rng = random.Random(seed)
            fens.append(random_position(rng.choice([chess.WHITE, chess.BLACK]), rng))
        return fens

    def test_detection_is_deterministic(self, seeds):
        for fen in self._positions(seeds):
            for color in (chess.WHITE, chess.BLACK):
                assert find_hanging(fen, color) == find_hanging(fen, color)

    def test_independent_of_side_to_move(self, seeds):
        for fen in self._positions(seeds):
            white_to_move = adapter.force_turn(fen, chess.WHITE)
            black_to_move = adapter.force_turn(fen, chess.BLACK)
            for color in (chess.WHITE, chess.BLACK):
                assert find_hanging(white_to_move, color) == find_hanging(black_to_move, color)

    def test_both_is_sorted_union(self, seeds):
        for fen in self._positions(seeds):
            white = find_hanging(fen, chess.WHITE)
            black = find_hanging(fen, chess.BLACK)
            both = hanging_squares(fen, TargetColor.BOTH)
            assert both == sorted(set(white) | set(black))
            assert len(both) == len(set(both))

    def test_results_are_pieces_of_that_color(self, seeds):
        for fen in self._positions(seeds):
            board = chess.Board(fen)
            for color in (chess.WHITE, chess.BLACK):
                for sq in find_hanging(fen, color):
                    assert board.color_at(sq) == color

    def test_source_position_is_not_mutated(self, seeds):
        for fen in self._positions(seeds):
            original = str(fen)
            hanging_squares(fen, TargetColor.BOTH)
            assert fen == original
