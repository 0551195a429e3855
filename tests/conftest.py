"""Shared test fixtures.

Usage:
    uv run pytest tests/                  # Fast, a handful of seeds
    uv run pytest tests/ --sweep          # Property checks over many seeds

Fixtures:
    fake_clock         - Manually advanced clock for session timing.
    fixed_factory      - Puzzle factory that serves known positions in order.
    clean_data_dir     - Backs up and restores data/current_puzzle.json.
    enable_validation  - Sets HANGING_PIECES_VALIDATE=1 for schema validation.
"""

from __future__ import annotations

import os
from pathlib import Path

import chess
import pytest

from hanging_pieces.generator import GeneratedPuzzle

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DATA_DIR = _PROJECT_ROOT / "data"

# After 1.e4 d5 2.exd5: the d5 pawn can be taken by the queen for free
EXD5_FEN = "rnbqkbnr/ppp1pppp/8/3P4/8/8/PPPP1PPP/RNBQKBNR b KQkq - 0 2"

# Rooks on a4 and a8 attack each other, neither is defended
ROOKS_FEN = "r3k3/8/8/8/R7/8/8/4K3 w - - 0 1"

# d5 is defended by Nf6 against cxd5, but Nxd5 uncovers check from Re1
DISCOVERY_FEN = "4k3/8/5n2/3p4/2P5/4N3/8/4R1K1 w - - 0 1"


# ---------------------------------------------------------------------------
# CLI option and marker registration
# ---------------------------------------------------------------------------


def pytest_addoption(parser):
    """Register --sweep CLI flag for many-seed property tests."""
    parser.addoption(
        "--sweep",
        action="store_true",
        default=False,
        help="Run randomized property checks over many seeds.",
    )


def pytest_configure(config):
    """Register the sweep marker."""
    config.addinivalue_line(
        "markers", "sweep: property test repeated over many random seeds"
    )


@pytest.fixture()
def seeds(request) -> list[int]:
    """Seeds used by randomized property tests."""
    if request.config.getoption("--sweep"):
        return list(range(200))
    return [1, 7, 42]


# ---------------------------------------------------------------------------
# Timing and puzzle fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


class FixedFactory:
    """Puzzle factory serving a fixed cycle of puzzles, recording requests."""

    def __init__(self, puzzles: list[GeneratedPuzzle]) -> None:
        self._puzzles = puzzles
        self.requests: list = []

    def __call__(self, mode, rng=None) -> GeneratedPuzzle:
        puzzle = self._puzzles[len(self.requests) % len(self._puzzles)]
        self.requests.append(mode)
        return puzzle


@pytest.fixture()
def fixed_factory() -> FixedFactory:
    return FixedFactory([
        GeneratedPuzzle(fen=ROOKS_FEN, answer_key=(chess.A4, chess.A8)),
        GeneratedPuzzle(fen=EXD5_FEN, answer_key=(chess.D5,)),
    ])


# ---------------------------------------------------------------------------
# Clean data directory fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_data_dir():
    """Back up and restore data/current_puzzle.json around each test."""
    puzzle_path = _DATA_DIR / "current_puzzle.json"

    orig_puzzle = None
    if puzzle_path.exists():
        orig_puzzle = puzzle_path.read_text(encoding="utf-8")

    yield

    if orig_puzzle is not None:
        puzzle_path.write_text(orig_puzzle, encoding="utf-8")
    elif puzzle_path.exists():
        puzzle_path.unlink()


# ---------------------------------------------------------------------------
# Schema validation fixture
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def enable_validation():
    """Set HANGING_PIECES_VALIDATE=1 for the test session.

    Restores the original env var value after the test.
    """
    original = os.environ.get("HANGING_PIECES_VALIDATE")
    os.environ["HANGING_PIECES_VALIDATE"] = "1"
    yield
    if original is None:
        os.environ.pop("HANGING_PIECES_VALIDATE", None)
    else:
        os.environ["HANGING_PIECES_VALIDATE"] = original
