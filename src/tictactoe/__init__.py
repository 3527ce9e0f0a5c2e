"""Tic-tac-toe against the computer: rules, AI opponent, and the web application."""

from .ai import Difficulty, MoveSelector, select_move
from .game import Board, Outcome, TicTacToeGame, evaluate
from .ui import app

__all__ = [
    "Board",
    "Difficulty",
    "MoveSelector",
    "Outcome",
    "TicTacToeGame",
    "app",
    "evaluate",
    "select_move",
]
