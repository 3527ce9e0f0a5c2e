"""Core rules for a 3x3 tic-tac-toe game against the computer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from .ai import MoveSelector

Player = str  # "X" or "O"

EMPTY = " "
HUMAN: Player = "X"
COMPUTER: Player = "O"

# Rows, columns, diagonals; scan order decides which line is reported first.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

IN_PROGRESS, WIN, DRAW = "in_progress", "win", "draw"

AWAITING_HUMAN = "awaiting_human"
AWAITING_COMPUTER = "awaiting_computer"
GAME_OVER = "game_over"


def other(player: Player) -> Player:
    return "O" if player == "X" else "X"


@dataclass(frozen=True)
class Outcome:
    status: str = IN_PROGRESS
    winner: Optional[Player] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != IN_PROGRESS


def empty_cells(cells: Sequence[str]) -> List[int]:
    return [i for i, c in enumerate(cells) if c == EMPTY]


def evaluate(
    cells: Sequence[str], player: Optional[Player] = None
) -> Union[Outcome, bool]:
    """Evaluate a board.

    Without ``player`` the board is scanned for the first complete line and an
    :class:`Outcome` is returned (win, draw, or still in progress). With a
    ``player`` the answer is a plain ``bool``: does that player own a complete
    line? The second form is what the lookahead strategies use on
    hypothetical boards.
    """

    if player is not None:
        return any(
            cells[a] == player and cells[b] == player and cells[c] == player
            for a, b, c in WINNING_LINES
        )

    for a, b, c in WINNING_LINES:
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return Outcome(WIN, v)
    if EMPTY not in cells:
        return Outcome(DRAW)
    return Outcome()


# ---------- Board ----------


@dataclass
class Board:
    # 'X', 'O', or ' ' (space) for empty, row-major
    cells: List[str] = field(default_factory=lambda: [EMPTY] * 9)

    def __post_init__(self) -> None:
        if len(self.cells) != 9:
            raise ValueError("A board has exactly 9 cells")

    def empty_cells(self) -> List[int]:
        return empty_cells(self.cells)

    def is_open(self, idx: int) -> bool:
        return 0 <= idx < 9 and self.cells[idx] == EMPTY

    def place(self, player: Player, idx: int) -> None:
        if not 0 <= idx < 9:
            raise ValueError(f"Cell index {idx} is out of range")
        if self.cells[idx] != EMPTY:
            raise ValueError("Cell already occupied")
        self.cells[idx] = player

    @classmethod
    def from_string(cls, layout: str) -> "Board":
        """Build a board from a 9-char string such as ``"XX.O....."``."""

        if len(layout) != 9:
            raise ValueError("Layout must describe 9 cells")
        return cls(cells=[c if c in ("X", "O") else EMPTY for c in layout.upper()])


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    """One human-versus-computer session: a board and whose turn it is.

    The outcome and phase are always recomputed from the board, so they can
    never drift from the position they describe.
    """

    board: Board = field(default_factory=Board)
    current_player: Player = HUMAN

    # ---- derived state ----

    @property
    def outcome(self) -> Outcome:
        return evaluate(self.board.cells)

    @property
    def winner(self) -> Optional[Player]:
        return self.outcome.winner

    @property
    def drawn(self) -> bool:
        return self.outcome.status == DRAW

    @property
    def is_over(self) -> bool:
        return self.outcome.is_terminal

    @property
    def phase(self) -> str:
        if self.is_over:
            return GAME_OVER
        if self.current_player == HUMAN:
            return AWAITING_HUMAN
        return AWAITING_COMPUTER

    def available_moves(self) -> List[int]:
        if self.is_over:
            return []
        return self.board.empty_cells()

    # ---- turn sequence ----

    def play_move(self, idx: int) -> None:
        """Commit a move for the player to move and hand over the turn."""
        if self.is_over:
            raise ValueError("Game already finished")
        self.board.place(self.current_player, idx)
        if not self.is_over:
            self.current_player = other(self.current_player)

    def play_human_move(self, idx: int) -> bool:
        # Bad input is ignored; the board is only touched on a legal move.
        if self.phase != AWAITING_HUMAN or not self.board.is_open(idx):
            return False
        self.play_move(idx)
        return True

    def play_computer_move(self, selector: "MoveSelector") -> int:
        if self.phase != AWAITING_COMPUTER:
            raise RuntimeError("The computer cannot move in phase " + self.phase)
        idx = selector.choose(self.board)
        self.play_move(idx)
        return idx

    def reset(self) -> None:
        self.board = Board()
        self.current_player = HUMAN
