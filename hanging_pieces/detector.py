"""Hanging piece detection.

A piece is hanging when the opponent can capture it and, after at
least one of those captures, its own side has no move back onto the
square. Both the attacker's and the defender's moves are generated with
the side to move forced, so the answer does not depend on whose turn
the position records.
"""

from __future__ import annotations

import chess

from hanging_pieces import board as adapter
from hanging_pieces.models import TargetColor


def _lands_on(moves: list[chess.Move], square: chess.Square) -> list[chess.Move]:
    return [m for m in moves if m.to_square == square]


def _can_recapture(fen: str, square: chess.Square, color: chess.Color) -> bool:
    """Return True if ``color`` has any legal move onto ``square``."""
    return bool(_lands_on(adapter.legal_moves(fen, color), square))


def _is_hanging(
    fen: str,
    square: chess.Square,
    color: chess.Color,
    opponent_moves: list[chess.Move],
) -> bool:
    captures = _lands_on(opponent_moves, square)
    if not captures:
        return False

    attacker_fen = adapter.force_turn(fen, not color)
    for capture in captures:
        after = adapter.apply_move(attacker_fen, capture)
        if not _can_recapture(after, square, color):
            return True
    return False


def is_hanging(fen: str, square: chess.Square) -> bool:
    """Return True if the piece on ``square`` is hanging.

    Empty squares are never hanging.
    """
    piece = adapter.parse(fen).piece_at(square)
    if piece is None:
        return False
    opponent_moves = adapter.legal_moves(fen, not piece.color)
    return _is_hanging(fen, square, piece.color, opponent_moves)


def find_hanging(fen: str, color: chess.Color) -> list[chess.Square]:
    """Return the squares of ``color``'s hanging pieces, ascending.

    Args:
        fen: Position to inspect. Its recorded side to move is ignored.
        color: Side whose pieces are examined.

    Returns:
        Sorted list of square indices (a1=0 .. h8=63).
    """
    opponent_moves = adapter.legal_moves(fen, not color)
    squares = [
        sq
        for sq, piece in adapter.occupancy(fen).items()
        if piece.color == color
    ]
    return sorted(
        sq for sq in squares
        if _is_hanging(fen, sq, color, opponent_moves)
    )


def hanging_squares(fen: str, target: TargetColor) -> list[chess.Square]:
    """Union of find_hanging() over every color ``target`` covers."""
    found: set[chess.Square] = set()
    for color in target.colors:
        found.update(find_hanging(fen, color))
    return sorted(found)
