#!/usr/bin/env python3
"""Random position and puzzle generation.

Positions come from a random walk of legal moves from the starting
position. A puzzle is a position whose answer key (the hanging squares
for the mode's target color) is non-empty; positions without one are
thrown away and regenerated.

Usage:
    uv run python -m hanging_pieces.generator --mode 4 --count 20
    uv run python -m hanging_pieces.generator --mode 0 --count 5 --seed 42 --output puzzles.json
"""

from __future__ import annotations

import argparse
import json
import os
import random
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import chess

from hanging_pieces.detector import hanging_squares
from hanging_pieces.models import Mode
from hanging_pieces.modes import MODES, get_mode

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_OUTPUT = _PROJECT_ROOT / "data" / "puzzles.json"

# Walk length is _MIN_PLIES + randint(0, _EXTRA_PLIES) half-moves
_MIN_PLIES = 20
_EXTRA_PLIES = 40


class PuzzleGenerationError(RuntimeError):
    """Raised when a bounded generation run finds no usable position."""


@dataclass(frozen=True)
class GeneratedPuzzle:
    fen: str
    answer_key: tuple[chess.Square, ...]


def _log(msg: str) -> None:
    """Print with flush for progress visibility."""
    print(msg, flush=True)


def random_position(side_to_move: chess.Color, rng: random.Random | None = None) -> str:
    """Play random legal moves from the start and return the resulting FEN.

    A game-over position reached mid-walk is undone so the walk keeps
    going. The final side to move is matched to ``side_to_move`` with
    one extra random move when needed; this is best-effort and does not
    happen when the walk ends in a finished game.

    Args:
        side_to_move: Color that should be to move in the result.
        rng: Random source. Defaults to the ``random`` module.
    """
    rng = rng or random
    board = chess.Board()

    half_moves = _MIN_PLIES + rng.randint(0, _EXTRA_PLIES)
    for _ in range(half_moves):
        # No claim_draw, so threefold repetition does not end the walk
        if board.is_game_over():
            board.pop()
        moves = list(board.legal_moves)
        if not moves:
            break
        board.push(rng.choice(moves))

    if board.turn != side_to_move and not board.is_game_over():
        moves = list(board.legal_moves)
        if moves:
            board.push(rng.choice(moves))

    return board.fen()


def generate_puzzle(
    mode: Mode,
    rng: random.Random | None = None,
    max_attempts: int | None = None,
) -> GeneratedPuzzle:
    """Generate a position with at least one hanging piece for ``mode``.

    Args:
        mode: Puzzle variant supplying side to move and target color.
        rng: Random source. Defaults to the ``random`` module.
        max_attempts: Give up after this many positions. None retries
            until a puzzle is found.

    Raises:
        PuzzleGenerationError: If ``max_attempts`` positions were tried
            and none had a hanging piece.
    """
    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        fen = random_position(mode.side_to_move, rng)
        squares = hanging_squares(fen, mode.target)
        if squares:
            return GeneratedPuzzle(fen=fen, answer_key=tuple(squares))
    raise PuzzleGenerationError(
        f"No position with hanging pieces after {attempts} attempts"
    )


def puzzle_to_dict(mode_index: int, puzzle: GeneratedPuzzle) -> dict:
    mode = get_mode(mode_index)
    return {
        "fen": puzzle.fen,
        "mode": mode_index,
        "description": mode.description,
        "target": mode.target.value,
        "side_to_move": chess.COLOR_NAMES[mode.side_to_move],
        "orientation": chess.COLOR_NAMES[mode.orientation],
        "answer_key": [chess.square_name(sq) for sq in puzzle.answer_key],
    }


def generate_batch(
    mode_index: int,
    count: int,
    seed: int | None = None,
) -> list[dict]:
    """Generate ``count`` distinct puzzles for one mode.

    Positions are deduplicated on their FEN.
    """
    mode = get_mode(mode_index)
    rng = random.Random(seed)
    seen_fens: set[str] = set()
    puzzles: list[dict] = []

    while len(puzzles) < count:
        puzzle = generate_puzzle(mode, rng)
        if puzzle.fen in seen_fens:
            continue
        seen_fens.add(puzzle.fen)
        puzzles.append(puzzle_to_dict(mode_index, puzzle))
        if len(puzzles) % 10 == 0:
            _log(f"  Generated {len(puzzles)}/{count}")

    return puzzles


def _write_puzzle_file(filepath: Path, puzzles: list[dict]) -> None:
    """Write puzzles to JSON file atomically."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    tmp = filepath.with_suffix(".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(puzzles, f, indent=2, ensure_ascii=False)
    os.replace(str(tmp), str(filepath))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Hanging pieces puzzle generator")
    parser.add_argument(
        "--mode", type=int, default=4, choices=range(len(MODES)),
        help="Mode index from the catalog (default: 4, both colors)",
    )
    parser.add_argument("--count", type=int, default=10, help="Number of puzzles (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--output", type=Path, default=_DEFAULT_OUTPUT,
        help="Output JSON file (default: data/puzzles.json)",
    )
    args = parser.parse_args(argv)

    if args.count < 1:
        parser.error("--count must be at least 1")

    mode = get_mode(args.mode)
    _log(f"Generating {args.count} puzzle(s) for mode {args.mode}: {mode.description}")

    start = time.time()
    puzzles = generate_batch(args.mode, args.count, seed=args.seed)
    elapsed = time.time() - start

    _write_puzzle_file(args.output, puzzles)
    _log(f"Wrote {len(puzzles)} puzzle(s) to {args.output} in {elapsed:.1f}s")


if __name__ == "__main__":
    main(sys.argv[1:])
