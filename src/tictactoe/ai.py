"""Exhaustive minimax search and the computer opponent built on top of it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import random

from .game import Player, TicTacToeGame, EMPTY, empty_cells, evaluate, is_full, other


WIN_SCORE = 10
LOSS_SCORE = -10
DRAW_SCORE = 0

DIFFICULTIES = ("easy", "hard")


@dataclass(frozen=True)
class Move:
    """A scored candidate. ``index`` is ``None`` for a terminal position."""

    score: int
    index: Optional[int] = None


def minimax(
    board: List[str],
    side_to_move: Player,
    maximizing: Player,
    minimizing: Player,
) -> Move:
    """Walk the full game tree below ``board`` and pick the best move.

    ``board`` is used as scratch space: every speculative placement is undone
    before returning, so the caller sees it unchanged. Terminal scores are
    fixed (+10 / -10 / 0) and do not depend on depth. Ties keep the first
    candidate in ascending index order.
    """
    winner = evaluate(board).winner
    if winner == minimizing:
        return Move(LOSS_SCORE)
    if winner == maximizing:
        return Move(WIN_SCORE)
    if is_full(board):
        return Move(DRAW_SCORE)

    next_side = minimizing if side_to_move == maximizing else maximizing
    moves: List[Move] = []
    for i in empty_cells(board):
        board[i] = side_to_move
        result = minimax(board, next_side, maximizing, minimizing)
        board[i] = EMPTY
        moves.append(Move(result.score, i))

    best = moves[0]
    if side_to_move == maximizing:
        for move in moves[1:]:
            if move.score > best.score:
                best = move
    else:
        for move in moves[1:]:
            if move.score < best.score:
                best = move
    return best


def best_move(board: List[str], maximizing: Player, minimizing: Player) -> Move:
    """Optimal move for ``maximizing``, who is assumed to be on turn."""
    return minimax(board, maximizing, maximizing, minimizing)


@dataclass
class ComputerPlayer:
    """Computer opponent.

    - ``"hard"`` plays the minimax move and cannot be beaten.
    - ``"easy"`` picks uniformly among the empty cells.
    """

    player: Player = "O"
    difficulty: str = "hard"
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty {self.difficulty!r}")

    @property
    def opponent(self) -> Player:
        return other(self.player)

    def choose(self, game: TicTacToeGame) -> int:
        if game.is_over():
            raise ValueError("Game already finished")
        if game.current_player != self.player:
            raise ValueError("It is not this computer player's turn")

        moves = game.available_moves()
        if not moves:
            raise RuntimeError("No valid moves available")

        if self.difficulty == "easy":
            return self.rng.choice(moves)

        move = best_move(game.board.copy(), self.player, self.opponent)
        if move.index is None:
            raise RuntimeError("Search returned no move for an open board")
        return move.index
