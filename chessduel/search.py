from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import chess

from . import rules
from .evaluator import Evaluator
from .models import Move

INF = 10**9


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int
    nodes: int


class SearchEngine:
    """Depth-bounded minimax with alpha-beta pruning.

    Every ply works on its own copy of the board, so the caller's position is
    never touched and an exception or a pruning break cannot leave a
    half-unwound board behind. Among equally scored root moves the first one
    in python-chess enumeration order wins.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None, depth: int = 2) -> None:
        self.evaluator = evaluator or Evaluator()
        self.depth = depth

    def search(
        self,
        board: chess.Board,
        depth: Optional[int] = None,
        maximizing: Optional[bool] = None,
    ) -> SearchResult:
        """Return the best root move for ``depth`` plies (the root move counts as one)."""
        depth = self.depth if depth is None else depth
        if maximizing is None:
            maximizing = board.turn == chess.WHITE

        best_move: Optional[chess.Move] = None
        best_score = -INF if maximizing else INF
        alpha, beta = -INF, INF
        nodes = 0

        for move in board.legal_moves:
            child = board.copy()
            child.push(move)
            score, sub_nodes = self._alphabeta(
                child, max(0, depth - 1), alpha, beta, not maximizing
            )
            nodes += sub_nodes + 1
            if maximizing:
                if score > best_score:
                    best_score, best_move = score, move
                alpha = max(alpha, best_score)
            else:
                if score < best_score:
                    best_score, best_move = score, move
                beta = min(beta, best_score)

        if best_move is None:
            return SearchResult(best_move=None, score=self.evaluator.evaluate(board), nodes=nodes)
        return SearchResult(best_move=Move.from_chess(best_move), score=best_score, nodes=nodes)

    def _alphabeta(
        self,
        board: chess.Board,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
    ) -> Tuple[int, int]:
        if depth == 0 or rules.is_terminal(board):
            return self.evaluator.evaluate(board), 1

        nodes = 0
        value = -INF if maximizing else INF
        for move in board.legal_moves:
            child = board.copy()
            child.push(move)
            score, child_nodes = self._alphabeta(child, depth - 1, alpha, beta, not maximizing)
            nodes += child_nodes + 1
            if maximizing:
                value = max(value, score)
                alpha = max(alpha, value)
            else:
                value = min(value, score)
                beta = min(beta, value)
            if beta <= alpha:
                break
        return value, nodes
