"""Shared data models for the Hanging Pieces trainer.

PuzzleSnapshot is the shared contract between the MCP server and
the TUI. Mode, Stats and the enums are used throughout the core.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import chess


class TargetColor(str, enum.Enum):
    """Which side's hanging pieces a puzzle asks for."""

    WHITE = "WHITE"
    BLACK = "BLACK"
    BOTH = "BOTH"

    @property
    def colors(self) -> tuple[chess.Color, ...]:
        if self is TargetColor.WHITE:
            return (chess.WHITE,)
        if self is TargetColor.BLACK:
            return (chess.BLACK,)
        return (chess.WHITE, chess.BLACK)


class PuzzleState(str, enum.Enum):
    PLAYING = "PLAYING"
    CHECK_RESULT = "CHECK_RESULT"
    DONE = "DONE"


@dataclass(frozen=True)
class Mode:
    """A fixed puzzle variant: who moves, board orientation, what to find."""

    side_to_move: chess.Color
    orientation: chess.Color
    target: TargetColor
    description: str


@dataclass
class Stats:
    """Running totals for one mode within a session."""

    times: list[float] = field(default_factory=list)
    correct_count: int = 0
    incorrect_count: int = 0

    @property
    def total(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def average_time(self) -> float:
        if not self.times:
            return 0.0
        return sum(self.times) / len(self.times)

    @property
    def success_rate(self) -> float:
        """Percentage of attempts solved correctly (0-100)."""
        if self.total == 0:
            return 0.0
        return self.correct_count / self.total * 100

    def record_correct(self, seconds: float) -> None:
        self.times.append(seconds)
        self.correct_count += 1

    def record_incorrect(self) -> None:
        self.incorrect_count += 1


@dataclass
class PuzzleSnapshot:
    """Represents one puzzle instance as seen by a front end."""

    mode_index: int
    description: str
    fen: str
    orientation: str
    target: str
    state: str
    selected: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    answer_key: list[str] | None = None
    elapsed: float = 0.0
    # Wall-clock start, set only while PLAYING so viewers can keep time
    started_at: float | None = None
    average_time: float = 0.0
    correct_count: int = 0
    incorrect_count: int = 0
    success_rate: float = 0.0
    message: str = ""
    severity: str = "info"
