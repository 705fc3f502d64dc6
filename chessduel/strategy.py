"""Move selection for the three AI tiers.

``MoveSelector.select_move`` always hands back a ``Future`` that resolves to a
``Move`` or ``None`` and never raises. Random and Balanced resolve before the
call returns; Strong resolves later, from the background worker thread.
"""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

import chess

from . import rules
from .config import StrategyConfig
from .models import Move, Tier
from .search import SearchEngine

log = logging.getLogger("chessduel")


def _think(legal_ucis: List[str], delay_s: float, rng: random.Random) -> Optional[str]:
    """Stand-in for an external engine: wait, then answer with any legal move."""
    time.sleep(delay_s)
    if not legal_ucis:
        return None
    return rng.choice(legal_ucis)


def _resolved(move: Optional[Move]) -> "Future[Optional[Move]]":
    future: Future = Future()
    future.set_result(move)
    return future


class MoveSelector:
    def __init__(
        self,
        search: Optional[SearchEngine] = None,
        config: Optional[StrategyConfig] = None,
    ) -> None:
        self.config = config or StrategyConfig()
        self.search = search or SearchEngine()
        self.rng = random.Random(self.config.seed)
        self._executor: Optional[ThreadPoolExecutor] = None

    def select_move(self, tier: Tier, board: chess.Board) -> "Future[Optional[Move]]":
        if tier == Tier.STRONG:
            return self._strong_move(board)
        try:
            if tier == Tier.BALANCED:
                return _resolved(self.balanced_move(board))
            return _resolved(self.random_move(board))
        except Exception:
            log.exception("%s move selection failed; falling back to random", tier.value)
            return _resolved(self.random_move(board))

    def random_move(self, board: chess.Board) -> Optional[Move]:
        moves = rules.legal_moves(board)
        if not moves:
            return None
        return self.rng.choice(moves)

    def balanced_move(self, board: chess.Board) -> Optional[Move]:
        search_board = board.copy()
        result = self.search.search(search_board, maximizing=search_board.turn == chess.WHITE)
        log.debug("Search picked %s (score %d, %d nodes)", result.best_move, result.score, result.nodes)
        if result.best_move is None:
            return self.random_move(search_board)
        return result.best_move

    def think_delay(self) -> float:
        lo, hi = self.config.think_min_s, self.config.think_max_s
        return lo + self.rng.random() * (hi - lo)

    def _strong_move(self, board: chess.Board) -> "Future[Optional[Move]]":
        snapshot = board.copy()
        legal_ucis = [m.uci() for m in snapshot.legal_moves]
        outcome: Future = Future()

        def _done(inner: Future) -> None:
            try:
                uci = inner.result()
                outcome.set_result(Move.from_uci(uci) if uci else None)
            except Exception as exc:
                log.warning("Background engine failed (%s); falling back to random", exc)
                outcome.set_result(self.random_move(snapshot))

        try:
            inner = self._pool().submit(_think, legal_ucis, self.think_delay(), self.rng)
        except RuntimeError as exc:
            log.warning("Background engine unavailable (%s); falling back to random", exc)
            return _resolved(self.random_move(snapshot))
        inner.add_done_callback(_done)
        return outcome

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=max(1, self.config.workers),
                thread_name_prefix="chessduel-engine",
            )
        return self._executor

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
