"""MCP server for the Hanging Pieces trainer.

Exposes puzzle sessions as tools via FastMCP. Sessions are stored in
memory keyed by UUID. The current puzzle is synced to
data/current_puzzle.json after every change for TUI consumption.
"""

from __future__ import annotations

import json
import os
import random
import sys
import uuid
from dataclasses import asdict
from pathlib import Path

# Add project root and mcp-server dir to path for imports
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_MCP_SERVER_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(_PROJECT_ROOT))
sys.path.insert(0, str(_MCP_SERVER_DIR))

import chess
from mcp.server.fastmcp import FastMCP

from hanging_pieces.detector import hanging_squares
from hanging_pieces.models import TargetColor
from hanging_pieces.modes import describe_modes
from hanging_pieces.session import PuzzleSession

from response_schemas import minify_hanging_result, minify_puzzle_state  # noqa: E402

mcp = FastMCP("hanging-pieces")

# In-memory session store: session_id -> PuzzleSession
_sessions: dict[str, PuzzleSession] = {}

_DATA_DIR = _PROJECT_ROOT / "data"


def _build_puzzle_state(session_id: str, session: PuzzleSession) -> dict:
    """Build the full puzzle state dict for a session.

    Args:
        session_id: UUID of the session.
        session: The session to describe.

    Returns:
        Dict of the PuzzleSnapshot plus session id and board diagram.
    """
    state = asdict(session.snapshot())
    state["session_id"] = session_id
    state["board_display"] = str(chess.Board(session.puzzle.fen))
    return state


def _sync_puzzle_json(puzzle_state: dict) -> None:
    """Write puzzle state to data/current_puzzle.json atomically.

    Uses temp file + os.replace() for atomic write.

    Args:
        puzzle_state: Full puzzle state dict to persist.
    """
    _DATA_DIR.mkdir(parents=True, exist_ok=True)
    target = _DATA_DIR / "current_puzzle.json"
    tmp = _DATA_DIR / "current_puzzle.tmp"
    tmp.write_text(
        json.dumps(puzzle_state, indent=2, default=str, ensure_ascii=False),
        encoding="utf-8",
    )
    os.replace(tmp, target)


def _get_session(session_id: str) -> PuzzleSession | None:
    return _sessions.get(session_id)


def _publish(session_id: str, session: PuzzleSession) -> dict:
    """Sync the TUI file and return the minified state."""
    state = _build_puzzle_state(session_id, session)
    _sync_puzzle_json(state)
    return minify_puzzle_state(state)


def _stats_summary(session: PuzzleSession) -> dict:
    modes = describe_modes()
    summary = []
    for index, stats in sorted(session.stats.items()):
        summary.append({
            "mode_index": index,
            "description": modes[index]["description"],
            "correct_count": stats.correct_count,
            "incorrect_count": stats.incorrect_count,
            "total": stats.total,
            "success_rate": round(stats.success_rate, 1),
            "average_time": round(stats.average_time, 1),
            "times": [round(t, 1) for t in stats.times],
        })
    return {"stats": summary}


# ---------------------------------------------------------------------------
# Mode and session tools
# ---------------------------------------------------------------------------


@mcp.tool()
def list_modes() -> dict:
    """List the available puzzle modes.

    Returns:
        Dict with a 'modes' list of index, description, side to move,
        board orientation and target color.
    """
    return {"modes": describe_modes()}


@mcp.tool()
def start_session(mode_index: int = 0, seed: int | None = None) -> dict:
    """Start a new puzzle session.

    Args:
        mode_index: Mode to play (see list_modes). Default 0.
        seed: Optional random seed for reproducible puzzles.

    Returns:
        Puzzle state for the first puzzle.
    """
    rng = random.Random(seed) if seed is not None else None
    try:
        session = PuzzleSession(mode_index, rng=rng)
    except IndexError as exc:
        return {"error": str(exc)}

    session_id = str(uuid.uuid4())
    _sessions[session_id] = session
    return _publish(session_id, session)


@mcp.tool()
def get_puzzle(session_id: str) -> dict:
    """Get the current puzzle of a session.

    Args:
        session_id: UUID of the session.

    Returns:
        Puzzle state with position, selection and timing.
    """
    session = _get_session(session_id)
    if session is None:
        return {"error": f"Session not found: {session_id}"}
    return minify_puzzle_state(_build_puzzle_state(session_id, session))


@mcp.tool()
def toggle_square(session_id: str, square: str) -> dict:
    """Select or deselect a square as hanging.

    Ignored once the puzzle has been judged.

    Args:
        session_id: UUID of the session.
        square: Square name, e.g. 'e4'.

    Returns:
        Updated puzzle state.
    """
    session = _get_session(session_id)
    if session is None:
        return {"error": f"Session not found: {session_id}"}

    try:
        sq = chess.parse_square(square.strip().lower())
    except ValueError:
        return {"error": f"Invalid square: {square}"}

    session.toggle(sq)
    return _publish(session_id, session)


@mcp.tool()
def submit_answer(session_id: str) -> dict:
    """Judge the selected squares against the hanging pieces.

    Args:
        session_id: UUID of the session.

    Returns:
        Puzzle state including answer key, missing and extra squares.
    """
    session = _get_session(session_id)
    if session is None:
        return {"error": f"Session not found: {session_id}"}

    session.submit()
    return _publish(session_id, session)


@mcp.tool()
def next_puzzle(session_id: str) -> dict:
    """Continue to a new puzzle after the current one was judged.

    Args:
        session_id: UUID of the session.

    Returns:
        Puzzle state for the new puzzle, or the unchanged state if the
        current puzzle has not been submitted yet.
    """
    session = _get_session(session_id)
    if session is None:
        return {"error": f"Session not found: {session_id}"}

    session.next_puzzle()
    return _publish(session_id, session)


@mcp.tool()
def switch_mode(session_id: str, mode_index: int) -> dict:
    """Switch a session to another mode, starting a fresh puzzle.

    Statistics for every mode played in the session are kept.

    Args:
        session_id: UUID of the session.
        mode_index: Mode to switch to.

    Returns:
        Puzzle state for the new puzzle.
    """
    session = _get_session(session_id)
    if session is None:
        return {"error": f"Session not found: {session_id}"}

    try:
        session.select_mode(mode_index)
    except IndexError as exc:
        return {"error": str(exc)}
    return _publish(session_id, session)


@mcp.tool()
def get_stats(session_id: str) -> dict:
    """Get per-mode statistics for a session.

    Args:
        session_id: UUID of the session.

    Returns:
        Dict with a 'stats' list, one entry per mode played.
    """
    session = _get_session(session_id)
    if session is None:
        return {"error": f"Session not found: {session_id}"}
    return _stats_summary(session)


# ---------------------------------------------------------------------------
# Analysis tools
# ---------------------------------------------------------------------------


@mcp.tool()
def find_hanging_pieces(fen: str, target: str = "both") -> dict:
    """Find hanging pieces in any position.

    Args:
        fen: Position in FEN notation.
        target: 'white', 'black' or 'both'. Default 'both'.

    Returns:
        Dict with fen, target and the sorted list of hanging squares.
    """
    try:
        target_color = TargetColor(target.upper())
    except ValueError:
        return {"error": f"Invalid target: {target}"}

    try:
        board = chess.Board(fen)
    except ValueError as exc:
        return {"error": f"Invalid FEN: {exc}"}

    squares = hanging_squares(board.fen(), target_color)
    return minify_hanging_result({
        "fen": board.fen(),
        "target": target_color.value,
        "squares": [chess.square_name(sq) for sq in squares],
    })


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run()
