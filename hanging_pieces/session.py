"""Puzzle session state machine.

A session holds one puzzle at a time plus per-mode statistics.
Each puzzle moves PLAYING -> CHECK_RESULT or PLAYING -> DONE; moving
on discards it and starts a fresh PLAYING puzzle for the same mode.
Actions that do not apply to the current state are ignored.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable

import chess

from hanging_pieces.generator import GeneratedPuzzle, generate_puzzle
from hanging_pieces.models import Mode, PuzzleSnapshot, PuzzleState, Stats
from hanging_pieces.modes import MODES

PuzzleFactory = Callable[[Mode, "random.Random | None"], GeneratedPuzzle]

_MESSAGES = {
    PuzzleState.PLAYING: ("Pick squares and press OK.", "info"),
    PuzzleState.CHECK_RESULT: (
        "Incorrect! Red = missing, orange = extra. Press Continue.",
        "error",
    ),
    PuzzleState.DONE: ("Perfect! Press Continue for the next puzzle.", "success"),
}


@dataclass
class Puzzle:
    """One generated position with its answer key and the player's progress."""

    fen: str
    answer_key: tuple[chess.Square, ...]
    started_at: float
    selection: set[chess.Square] = field(default_factory=set)
    missing: tuple[chess.Square, ...] = ()
    extra: tuple[chess.Square, ...] = ()
    state: PuzzleState = PuzzleState.PLAYING
    elapsed: float = 0.0


def _names(squares) -> list[str]:
    return [chess.square_name(sq) for sq in sorted(squares)]


class PuzzleSession:
    """Runs puzzles for one player and keeps per-mode statistics."""

    def __init__(
        self,
        mode_index: int = 0,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        puzzle_factory: PuzzleFactory = generate_puzzle,
        modes: tuple[Mode, ...] = MODES,
    ) -> None:
        """Start a session with a fresh puzzle for ``mode_index``.

        Args:
            mode_index: Index into ``modes``.
            rng: Random source handed to ``puzzle_factory``.
            clock: Monotonic time source in seconds.
            wall_clock: Epoch time source used to anchor snapshots.
            puzzle_factory: Callable returning a GeneratedPuzzle for a mode.
            modes: Mode catalog.

        Raises:
            IndexError: If ``mode_index`` is not in the catalog.
        """
        self._rng = rng
        self._clock = clock
        self._wall_clock = wall_clock
        self._puzzle_factory = puzzle_factory
        self._modes = modes
        self.stats: dict[int, Stats] = {}
        self.mode_index = mode_index
        self.puzzle: Puzzle
        self.select_mode(mode_index)

    @property
    def mode(self) -> Mode:
        return self._modes[self.mode_index]

    @property
    def state(self) -> PuzzleState:
        return self.puzzle.state

    @property
    def current_stats(self) -> Stats:
        return self.stats[self.mode_index]

    @property
    def elapsed(self) -> float:
        """Seconds spent on the puzzle; stops counting once it is judged."""
        if self.puzzle.state is PuzzleState.PLAYING:
            return self._clock() - self.puzzle.started_at
        return self.puzzle.elapsed

    # -- actions -----------------------------------------------------------

    def select_mode(self, index: int) -> None:
        """Switch to mode ``index`` and start a fresh puzzle.

        Statistics already gathered for any mode are kept.
        """
        if not 0 <= index < len(self._modes):
            raise IndexError(f"Mode index out of range: {index}")
        self.mode_index = index
        self.stats.setdefault(index, Stats())
        self._start_puzzle()

    def toggle(self, square: chess.Square) -> bool:
        """Add or remove ``square`` from the selection.

        Returns:
            True if the selection changed, False if the puzzle is not
            being played.
        """
        if self.puzzle.state is not PuzzleState.PLAYING:
            return False
        self.puzzle.selection ^= {square}
        return True

    def submit(self) -> PuzzleState:
        """Judge the current selection against the answer key."""
        puzzle = self.puzzle
        if puzzle.state is not PuzzleState.PLAYING:
            return puzzle.state

        answer = set(puzzle.answer_key)
        puzzle.elapsed = self._clock() - puzzle.started_at
        puzzle.missing = tuple(sorted(answer - puzzle.selection))
        puzzle.extra = tuple(sorted(puzzle.selection - answer))

        stats = self.current_stats
        if not puzzle.missing and not puzzle.extra:
            stats.record_correct(puzzle.elapsed)
            puzzle.state = PuzzleState.DONE
        else:
            stats.record_incorrect()
            puzzle.state = PuzzleState.CHECK_RESULT
        return puzzle.state

    def next_puzzle(self) -> bool:
        """Replace a judged puzzle with a new one for the same mode.

        Returns:
            True if a new puzzle was started.
        """
        if self.puzzle.state is PuzzleState.PLAYING:
            return False
        self._start_puzzle()
        return True

    def confirm(self) -> PuzzleState:
        """OK/Continue button: judge while playing, otherwise move on."""
        if self.puzzle.state is PuzzleState.PLAYING:
            return self.submit()
        self.next_puzzle()
        return self.puzzle.state

    def _start_puzzle(self) -> None:
        generated = self._puzzle_factory(self.mode, self._rng)
        self.puzzle = Puzzle(
            fen=generated.fen,
            answer_key=tuple(sorted(generated.answer_key)),
            started_at=self._clock(),
        )

    # -- views -------------------------------------------------------------

    def snapshot(self) -> PuzzleSnapshot:
        """Build the front-end view of the current puzzle.

        The answer key is only revealed once the puzzle has been judged.
        While playing, ``started_at`` is the wall-clock start so a viewer
        reading a stored snapshot can keep the timer running.
        """
        puzzle = self.puzzle
        stats = self.current_stats
        mode = self.mode
        message, severity = _MESSAGES[puzzle.state]
        revealed = puzzle.state is not PuzzleState.PLAYING
        elapsed = self.elapsed

        return PuzzleSnapshot(
            mode_index=self.mode_index,
            description=mode.description,
            fen=puzzle.fen,
            orientation=chess.COLOR_NAMES[mode.orientation],
            target=mode.target.value,
            state=puzzle.state.value,
            selected=_names(puzzle.selection),
            missing=_names(puzzle.missing),
            extra=_names(puzzle.extra),
            answer_key=_names(puzzle.answer_key) if revealed else None,
            elapsed=round(elapsed, 1),
            started_at=None if revealed else self._wall_clock() - elapsed,
            average_time=round(stats.average_time, 1),
            correct_count=stats.correct_count,
            incorrect_count=stats.incorrect_count,
            success_rate=round(stats.success_rate, 1),
            message=message,
            severity=severity,
        )
