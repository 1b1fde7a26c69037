"""Tic-tac-toe package exposing the outcome evaluator, minimax search, and web application."""

from .ai import ComputerPlayer, Move, best_move, minimax
from .game import Outcome, TicTacToeGame, evaluate
from .ui import app

__all__ = [
    "ComputerPlayer",
    "Move",
    "Outcome",
    "TicTacToeGame",
    "app",
    "best_move",
    "evaluate",
    "minimax",
]
