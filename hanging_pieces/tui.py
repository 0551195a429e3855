"""Terminal UI for the Hanging Pieces trainer.

Renders a Rich-based chess board with the player's selection and the
judging result highlighted. Three ways to run it:

    uv run python -m hanging_pieces.tui --play 4      # play mode 4 interactively
    uv run python -m hanging_pieces.tui --sample      # render one puzzle and exit
    uv run python -m hanging_pieces.tui               # follow the MCP server's puzzle

The default watch mode follows data/current_puzzle.json via watchdog
at ~4Hz.
"""

from __future__ import annotations

import argparse
import json
import random
import sys
import time
from dataclasses import asdict
from pathlib import Path

import chess
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hanging_pieces.modes import MODES, describe_modes
from hanging_pieces.session import PuzzleSession

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DATA_DIR = _PROJECT_ROOT / "data"
_CURRENT_PUZZLE = _DATA_DIR / "current_puzzle.json"

# Unicode piece symbols
_PIECE_SYMBOLS = {
    "K": "♔", "Q": "♕", "R": "♖", "B": "♗",
    "N": "♘", "P": "♙",
    "k": "♚", "q": "♛", "r": "♜", "b": "♝",
    "n": "♞", "p": "♟",
}

_LIGHT_SQ = "grey85"
_DARK_SQ = "grey50"
_SELECTED = "green3"
_MISSING = "red3"
_EXTRA = "orange3"

_SEVERITY_STYLES = {"info": "cyan", "success": "green", "error": "red"}


def _load_puzzle_state(path: Path) -> dict | None:
    """Load a puzzle state dict from a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed dict or None if file missing/corrupt.
    """
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        if isinstance(data, dict):
            return data
        return None
    except (json.JSONDecodeError, OSError):
        return None


def tick_elapsed(state: dict, now: float) -> dict:
    """Return ``state`` with elapsed recomputed from its wall-clock start.

    Judged puzzles carry no ``started_at`` and come back unchanged.
    """
    started_at = state.get("started_at")
    if state.get("state") != "PLAYING" or started_at is None:
        return state
    return {**state, "elapsed": max(0.0, now - started_at)}


def square_styles(state: dict) -> dict[int, str]:
    """Map squares to highlight colors.

    Missing squares are red and extra squares orange; any other
    selected square is green.
    """
    styles: dict[int, str] = {}
    for name in state.get("missing") or []:
        styles[chess.parse_square(name)] = _MISSING
    for name in state.get("extra") or []:
        styles[chess.parse_square(name)] = _EXTRA
    for name in state.get("selected") or []:
        styles.setdefault(chess.parse_square(name), _SELECTED)
    return styles


def render_board(state: dict) -> Layout:
    """Render the full board layout from a puzzle state dict.

    Args:
        state: Puzzle state dict with fen, orientation, selection, etc.

    Returns:
        Rich Layout with board and sidebar.
    """
    layout = Layout()
    layout.split_row(
        Layout(name="board", ratio=2),
        Layout(name="sidebar", ratio=1),
    )

    layout["board"].update(_render_board_panel(state))
    layout["sidebar"].update(_render_sidebar(state))

    return layout


def _render_board_panel(state: dict) -> Panel:
    """Render the chess board as a Rich Panel.

    Args:
        state: Puzzle state dict.

    Returns:
        Panel containing the board.
    """
    fen = state.get("fen", chess.STARTING_FEN)
    is_flipped = state.get("orientation", "white") == "black"

    board = chess.Board(fen)
    highlights = square_styles(state)

    table = Table(show_header=False, show_edge=False, pad_edge=False,
                  box=None, padding=(0, 1))

    # Rank label + 8 squares
    table.add_column(width=2, justify="right")
    for _ in range(8):
        table.add_column(width=3, justify="center")

    ranks = range(8) if is_flipped else range(7, -1, -1)
    files = list(range(7, -1, -1)) if is_flipped else list(range(8))

    for rank in ranks:
        row: list[Text] = [Text(str(rank + 1), style="bold")]
        for file in files:
            sq = chess.square(file, rank)
            piece = board.piece_at(sq)

            is_light = (rank + file) % 2 == 1
            bg = highlights.get(sq, _LIGHT_SQ if is_light else _DARK_SQ)

            if piece is not None:
                symbol = _PIECE_SYMBOLS.get(piece.symbol(), "?")
                cell = Text(f" {symbol} ", style=f"on {bg}")
            else:
                cell = Text("   ", style=f"on {bg}")

            row.append(cell)

        table.add_row(*row)

    file_labels = [Text("  ")]
    for f in files:
        file_labels.append(Text(f" {chess.FILE_NAMES[f]} ", style="bold"))
    table.add_row(*file_labels)

    title = f"Find Hanging Pieces of {state.get('description', '')}".strip()
    return Panel(table, title=title, border_style="blue")


def _render_sidebar(state: dict) -> Panel:
    """Render the sidebar with timing, stats and judging result.

    Args:
        state: Puzzle state dict.

    Returns:
        Panel containing sidebar info.
    """
    parts: list[str] = []

    severity = state.get("severity", "info")
    style = _SEVERITY_STYLES.get(severity, "cyan")
    message = state.get("message", "")
    if message:
        parts.append(f"[{style}]{message}[/{style}]")
        parts.append("")

    correct = state.get("correct_count", 0)
    total = correct + state.get("incorrect_count", 0)
    parts.append(f"[bold]Time:[/bold] {state.get('elapsed', 0.0):.1f}s")
    parts.append(f"[bold]Avg:[/bold] {state.get('average_time', 0.0):.1f}s")
    parts.append(f"[bold]Correct:[/bold] {correct}/{total}")
    parts.append(f"[bold]Rate:[/bold] {state.get('success_rate', 0.0):.1f}%")
    parts.append("")

    selected = state.get("selected") or []
    parts.append(f"[bold]Selected:[/bold] {' '.join(selected) or '-'}")

    if state.get("state") != "PLAYING":
        answer = state.get("answer_key") or []
        parts.append(f"[bold]Answer:[/bold] {' '.join(answer)}")
        missing = state.get("missing") or []
        extra = state.get("extra") or []
        if missing:
            parts.append(f"[{_MISSING}]Missing:[/{_MISSING}] {' '.join(missing)}")
        if extra:
            parts.append(f"[{_EXTRA}]Extra:[/{_EXTRA}] {' '.join(extra)}")

    board = chess.Board(state.get("fen", chess.STARTING_FEN))
    parts.append("")
    parts.append(f"To move: {chess.COLOR_NAMES[board.turn]}")

    return Panel("\n".join(parts), title="Info", border_style="green")


def _render_waiting() -> Panel:
    """Render a waiting message when no puzzle is active.

    Returns:
        Panel with waiting message.
    """
    return Panel(
        Text("Waiting for puzzle...\n\nStart a session via MCP server to see the board.",
             justify="center"),
        title="Hanging Pieces",
        border_style="dim",
    )


def _render_modes() -> Panel:
    lines = [f"{m['index']}: {m['description']}" for m in describe_modes()]
    return Panel("\n".join(lines), title="Find Hanging Pieces of:", border_style="blue")


def apply_command(session: PuzzleSession, command: str) -> str:
    """Apply one line of player input to ``session``.

    Commands: a square name toggles it, ``ok`` (or an empty line)
    submits or continues, ``mode N`` switches mode, ``modes`` lists
    them and ``quit`` ends the loop.

    Returns:
        One of "quit", "modes", "ok", "mode", "toggle", "ignored" or
        "unknown".
    """
    command = command.strip().lower()

    if command in ("q", "quit", "exit"):
        return "quit"
    if command == "modes":
        return "modes"
    if command in ("", "ok", "continue", "c"):
        session.confirm()
        return "ok"
    if command.startswith("mode "):
        try:
            session.select_mode(int(command.split()[1]))
        except (ValueError, IndexError):
            return "unknown"
        return "mode"
    if command in chess.SQUARE_NAMES:
        return "toggle" if session.toggle(chess.parse_square(command)) else "ignored"
    return "unknown"


def _play_loop(console: Console, mode_index: int, seed: int | None) -> None:
    """Play puzzles interactively until the player quits.

    Args:
        console: Rich Console instance.
        mode_index: Mode to start with.
        seed: Optional random seed.
    """
    rng = random.Random(seed) if seed is not None else None
    session = PuzzleSession(mode_index, rng=rng)

    while True:
        console.print(render_board(asdict(session.snapshot())))
        try:
            command = console.input("[bold]square / ok / mode N / quit > [/bold]")
        except (EOFError, KeyboardInterrupt):
            break

        result = apply_command(session, command)
        if result == "quit":
            break
        if result == "modes":
            console.print(_render_modes())
        elif result == "unknown":
            console.print(f"[red]Unknown command: {command}[/red]")


def _watch_loop(console: Console) -> None:
    """Watch current_puzzle.json and auto-update display at ~4Hz.

    The timer of a puzzle being played is redrawn on every tick.

    Args:
        console: Rich Console instance.
    """
    from watchdog.events import FileSystemEventHandler
    from watchdog.observers import Observer

    last_state: dict | None = None
    state_changed = True

    class _Handler(FileSystemEventHandler):
        def on_modified(self, event):
            nonlocal state_changed
            if str(event.src_path).endswith("current_puzzle.json"):
                state_changed = True

        # os.replace() shows up as a move onto the target
        def on_moved(self, event):
            nonlocal state_changed
            if str(event.dest_path).endswith("current_puzzle.json"):
                state_changed = True

    observer = Observer()
    _DATA_DIR.mkdir(parents=True, exist_ok=True)
    observer.schedule(_Handler(), str(_DATA_DIR), recursive=False)
    observer.start()

    try:
        with Live(console=console, refresh_per_second=4) as live:
            while True:
                if state_changed:
                    state = _load_puzzle_state(_CURRENT_PUZZLE)
                    if state is not None:
                        last_state = state
                        live.update(render_board(tick_elapsed(state, time.time())))
                    elif last_state is None:
                        live.update(_render_waiting())
                    state_changed = False
                elif last_state is not None and last_state.get("state") == "PLAYING":
                    live.update(render_board(tick_elapsed(last_state, time.time())))
                time.sleep(0.25)
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for tui.py."""
    parser = argparse.ArgumentParser(
        description="Hanging Pieces Terminal UI"
    )
    parser.add_argument(
        "--play", type=int, metavar="MODE", choices=range(len(MODES)),
        help="Play puzzles of the given mode interactively",
    )
    parser.add_argument(
        "--sample", action="store_true",
        help="Render one generated puzzle and exit (no watch loop)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args(argv)

    console = Console()

    if args.sample:
        rng = random.Random(args.seed) if args.seed is not None else None
        session = PuzzleSession(args.play or 0, rng=rng)
        console.print(render_board(asdict(session.snapshot())))
        return

    if args.play is not None:
        _play_loop(console, args.play, args.seed)
        return

    _watch_loop(console)


if __name__ == "__main__":
    main(sys.argv[1:])
