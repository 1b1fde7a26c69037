"""Board rules and outcome evaluation for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Player = str  # "X" or "O"

EMPTY = " "
BOARD_SIZE = 9

# Rows top to bottom, columns left to right, then main and anti diagonal.
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


@dataclass(frozen=True)
class Outcome:
    """Result of scanning a board: the winner and the line it completed."""

    winner: Optional[Player] = None
    line: Tuple[int, ...] = ()


def empty_board() -> List[str]:
    return [EMPTY] * BOARD_SIZE


def other(player: Player) -> Player:
    return "O" if player == "X" else "X"


def empty_cells(board: List[str]) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


def is_full(board: List[str]) -> bool:
    return all(c != EMPTY for c in board)


def evaluate(board: List[str]) -> Outcome:
    """Return the first completed line in ``WINNING_LINES`` order.

    A full board without a line is reported the same way as an open one;
    callers combine the result with :func:`is_full` to detect a draw.
    """
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return Outcome(winner=v, line=(a, b, c))
    return Outcome()


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    board: List[str] = field(default_factory=empty_board)
    current_player: Player = "X"
    winner: Optional[Player] = None
    line: Tuple[int, ...] = ()
    drawn: bool = False

    # ---- API used by UI & AI ----

    def is_over(self) -> bool:
        return self.winner is not None or self.drawn

    def available_moves(self) -> List[int]:
        if self.is_over():
            return []
        return empty_cells(self.board)

    def play_move(self, index: int) -> None:
        """Place the current player's marker, update the outcome and pass the turn."""
        if self.is_over():
            raise ValueError("Game already finished")
        if not 0 <= index < BOARD_SIZE:
            raise ValueError(f"Cell index {index} is outside the board")
        if self.board[index] != EMPTY:
            raise ValueError("Cell already occupied")

        self.board[index] = self.current_player
        self._update_state()
        self.current_player = other(self.current_player)

    def restart(self) -> None:
        self.board = empty_board()
        self.current_player = "X"
        self.winner = None
        self.line = ()
        self.drawn = False

    # ---- helpers ----

    def _update_state(self) -> None:
        outcome = evaluate(self.board)
        if outcome.winner:
            self.winner = outcome.winner
            self.line = outcome.line
            self.drawn = False
            return
        if is_full(self.board):
            self.drawn = True
