"""Computer opponent: random, one-ply lookahead, and full-depth minimax."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Union
import logging
import math
import random

from .game import COMPUTER, EMPTY, Board, Player, empty_cells, evaluate, other


logger = logging.getLogger(__name__)

WIN_SCORE = 10
LOSS_SCORE = -10
DRAW_SCORE = 0


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


Cells = Union[Board, Sequence[str]]


def _cells_of(board: Cells) -> List[str]:
    return list(board.cells if isinstance(board, Board) else board)


# ---- strategies ----


def easy_move(cells: List[str], player: Player, rng: random.Random) -> int:
    return rng.choice(empty_cells(cells))


def normal_move(cells: List[str], player: Player, rng: random.Random) -> int:
    """Take a winning cell, else block the opponent's, else play at random."""

    moves = empty_cells(cells)
    for mark in (player, other(player)):
        for idx in moves:
            trial = cells.copy()
            trial[idx] = mark
            if evaluate(trial, mark):
                return idx
    return rng.choice(moves)


def minimax(cells: List[str], maximizing: bool, player: Player = COMPUTER) -> int:
    """Score ``cells`` under perfect play with no depth limit.

    ``player`` is the maximizing side. Marks are placed on ``cells`` and
    removed again on the way back up, so the list is left exactly as it was
    passed in.
    """

    outcome = evaluate(cells)
    if outcome.is_terminal:
        if outcome.winner is None:
            return DRAW_SCORE
        return WIN_SCORE if outcome.winner == player else LOSS_SCORE

    mark = player if maximizing else other(player)
    best = -math.inf if maximizing else math.inf
    for idx in range(9):
        if cells[idx] != EMPTY:
            continue
        cells[idx] = mark
        try:
            score = minimax(cells, not maximizing, player)
        finally:
            cells[idx] = EMPTY
        best = max(best, score) if maximizing else min(best, score)
    return int(best)


def hard_move(cells: List[str], player: Player, rng: random.Random) -> int:
    # First maximal index wins ties; ``cells`` is already a private copy.
    best_score = -math.inf
    best_move: Optional[int] = None
    for idx in empty_cells(cells):
        cells[idx] = player
        try:
            score = minimax(cells, False, player)
        finally:
            cells[idx] = EMPTY
        if score > best_score:
            best_score, best_move = score, idx
    if best_move is None:
        raise RuntimeError("No valid moves available")
    return best_move


Strategy = Callable[[List[str], Player, random.Random], int]

STRATEGIES: Dict[Difficulty, Strategy] = {
    Difficulty.EASY: easy_move,
    Difficulty.NORMAL: normal_move,
    Difficulty.HARD: hard_move,
}


def select_move(
    board: Cells,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    player: Player = COMPUTER,
) -> int:
    """Return the cell index ``player`` occupies next at ``difficulty``.

    The board must still have an empty cell and no winner; anything else is a
    bug in the caller and raises ``RuntimeError``. The board passed in is
    never modified.
    """

    cells = _cells_of(board)
    if evaluate(cells).is_terminal:
        raise RuntimeError("No valid moves available")

    difficulty = Difficulty(difficulty)
    move = STRATEGIES[difficulty](cells, player, rng or random.Random())
    logger.debug("%s (%s) selects cell %d", player, difficulty.value, move)
    return move


@dataclass
class MoveSelector:
    """Computer player bound to a mark and a difficulty for one session."""

    difficulty: Difficulty = Difficulty.EASY
    player: Player = COMPUTER
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        self.difficulty = Difficulty(self.difficulty)

    def choose(self, board: Cells) -> int:
        return select_move(board, self.difficulty, self.rng, self.player)
