"""Board adapter over python-chess.

Positions are passed around as FEN strings. Every helper here builds a
fresh chess.Board from the FEN, so callers never share a mutable board.

python-chess only generates moves for the side recorded as to move.
force_turn() re-states a position with another side to move, which
lets legal_moves() enumerate moves for either color on demand.
"""

from __future__ import annotations

import chess

_TURN_FIELD = {chess.WHITE: "w", chess.BLACK: "b"}


def parse(fen: str) -> chess.Board:
    """Build a board from a FEN string.

    Raises:
        ValueError: If the FEN cannot be parsed.
    """
    return chess.Board(fen)


def serialize(board: chess.Board) -> str:
    return board.fen()


def force_turn(fen: str, color: chess.Color) -> str:
    """Return ``fen`` with its side-to-move field set to ``color``.

    Piece placement, castling rights, en passant square and move
    counters are left untouched.
    """
    parts = fen.split(" ")
    if len(parts) < 2:
        raise ValueError(f"FEN has no side-to-move field: {fen!r}")
    parts[1] = _TURN_FIELD[color]
    return " ".join(parts)


def occupancy(fen: str) -> dict[chess.Square, chess.Piece]:
    return parse(fen).piece_map()


def legal_moves(fen: str, color: chess.Color | None = None) -> list[chess.Move]:
    """Legal moves for ``color``, regardless of whose turn the FEN records.

    Args:
        fen: Position to enumerate.
        color: Side to generate moves for. Defaults to the recorded side.
    """
    if color is not None:
        fen = force_turn(fen, color)
    return list(parse(fen).legal_moves)


def apply_move(fen: str, move: chess.Move) -> str:
    """Return the position after ``move``; ``fen`` itself is unchanged."""
    board = parse(fen)
    board.push(move)
    return serialize(board)


def is_game_over(fen: str) -> bool:
    return parse(fen).is_game_over()
