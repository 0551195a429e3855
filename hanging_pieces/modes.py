"""Catalog of puzzle modes.

Modes are addressed by their index in MODES; the index is also the
key of a session's per-mode statistics.
"""

from __future__ import annotations

import chess

from hanging_pieces.models import Mode, TargetColor

MODES: tuple[Mode, ...] = (
    Mode(chess.WHITE, chess.WHITE, TargetColor.BLACK, "Black (white-view)"),
    Mode(chess.BLACK, chess.BLACK, TargetColor.WHITE, "White (black-view)"),
    Mode(chess.BLACK, chess.WHITE, TargetColor.WHITE, "White (white-view)"),
    Mode(chess.WHITE, chess.BLACK, TargetColor.BLACK, "Black (black-view)"),
    Mode(chess.WHITE, chess.WHITE, TargetColor.BOTH, "Both (white-view)"),
    Mode(chess.BLACK, chess.BLACK, TargetColor.BOTH, "Both (black-view)"),
)


def get_mode(index: int) -> Mode:
    """Return the mode at ``index``.

    Raises:
        IndexError: If ``index`` is outside the catalog. Negative indices
            are rejected rather than counted from the end.
    """
    if not 0 <= index < len(MODES):
        raise IndexError(f"Mode index out of range: {index}")
    return MODES[index]


def describe_modes() -> list[dict]:
    """Return the catalog as plain dicts for menus and tool responses."""
    return [
        {
            "index": i,
            "description": mode.description,
            "side_to_move": chess.COLOR_NAMES[mode.side_to_move],
            "orientation": chess.COLOR_NAMES[mode.orientation],
            "target": mode.target.value,
        }
        for i, mode in enumerate(MODES)
    ]
