"""Response schemas and minification for MCP tool responses.

Minifies MCP tool return values to reduce LLM context token waste.
data/current_puzzle.json (TUI sync) is NOT affected; only MCP return
values are minified.
"""

from __future__ import annotations

import os


# ---------------------------------------------------------------------------
# Minification functions
# ---------------------------------------------------------------------------


def minify_puzzle_state(state: dict) -> dict:
    """Minify a puzzle state dict for MCP response.

    Drops the board diagram and the status text, and leaves out
    square lists that are empty. The answer key only appears once the
    puzzle has been judged.

    Args:
        state: Full puzzle state dict (as produced by _build_puzzle_state).

    Returns:
        Minified dict with reduced token footprint.
    """
    result = {}

    # Keep core fields as-is
    for key in (
        "session_id", "mode_index", "fen", "orientation", "target", "state",
        "selected", "elapsed",
    ):
        if key in state:
            result[key] = state[key]

    # Judging output only once the puzzle left PLAYING
    if state.get("state") != "PLAYING":
        result["answer_key"] = state.get("answer_key") or []
        for key in ("missing", "extra"):
            squares = state.get(key) or []
            if squares:
                result[key] = squares

    # Collapse per-mode counters into one compact dict
    result["stats"] = {
        "correct": state.get("correct_count", 0),
        "incorrect": state.get("incorrect_count", 0),
        "avg_time": state.get("average_time", 0.0),
    }

    # Removed fields: board_display, description, message, severity, success_rate

    return result


def minify_hanging_result(result: dict) -> dict:
    """Minify a find_hanging_pieces response.

    Adds a count and drops the echoed FEN.

    Args:
        result: Dict with fen, target and squares.

    Returns:
        Minified dict.
    """
    squares = result.get("squares", [])
    return {
        "target": result.get("target"),
        "squares": squares,
        "count": len(squares),
    }


# ---------------------------------------------------------------------------
# Validation schemas (dict-based)
# ---------------------------------------------------------------------------

PUZZLE_STATE_SCHEMA = {
    "session_id": str,
    "mode_index": int,
    "fen": str,
    "orientation": str,
    "target": str,
    "state": str,
    "selected": list,
    "elapsed": (int, float),
    "stats": dict,
}

JUDGED_PUZZLE_SCHEMA = {
    **PUZZLE_STATE_SCHEMA,
    "answer_key": list,
}

HANGING_RESULT_SCHEMA = {
    "target": str,
    "squares": list,
    "count": int,
}

STATS_SCHEMA = {
    "stats": list,
}

ERROR_SCHEMA = {
    "error": str,
}


def validate_response(response: dict, schema: dict) -> list[str]:
    """Validate a response dict against a schema.

    Only runs when HANGING_PIECES_VALIDATE=1 env var is set.

    Args:
        response: Response dict to validate.
        schema: Dict mapping key names to expected types (or tuple of types).

    Returns:
        List of validation error strings (empty = valid).
    """
    if os.environ.get("HANGING_PIECES_VALIDATE") != "1":
        return []

    errors = []

    if not isinstance(response, dict):
        errors.append(f"Response is not a dict: {type(response).__name__}")
        return errors

    for key, expected_types in schema.items():
        if key not in response:
            errors.append(f"Missing key: {key}")
            continue

        value = response[key]
        if isinstance(expected_types, tuple):
            if not isinstance(value, expected_types):
                type_names = ", ".join(t.__name__ for t in expected_types)
                errors.append(
                    f"Key '{key}': expected ({type_names}), "
                    f"got {type(value).__name__}"
                )
        else:
            if not isinstance(value, expected_types):
                errors.append(
                    f"Key '{key}': expected {expected_types.__name__}, "
                    f"got {type(value).__name__}"
                )

    return errors
