from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import chess
import pytest

import chessduel.strategy as strategy
from chessduel import MoveSelector, Tier, rules
from chessduel.config import StrategyConfig
from chessduel.search import SearchResult

MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


@pytest.fixture
def selector():
    s = MoveSelector(config=StrategyConfig(think_min_s=0.01, think_max_s=0.02, seed=3))
    yield s
    s.shutdown()


@pytest.mark.parametrize("tier", list(Tier))
def test_every_tier_returns_a_legal_move(selector, tier):
    board = chess.Board()
    move = selector.select_move(tier, board).result(timeout=5)
    assert move in rules.legal_moves(board)
    assert board.fen() == chess.STARTING_FEN


@pytest.mark.parametrize("tier", list(Tier))
def test_no_move_without_legal_moves(selector, tier):
    assert selector.select_move(tier, chess.Board(MATE)).result(timeout=5) is None


def test_random_and_balanced_resolve_immediately(selector):
    board = chess.Board()
    assert selector.select_move(Tier.RANDOM, board).done()
    assert selector.select_move(Tier.BALANCED, board).done()


def test_balanced_takes_free_material(selector):
    board = chess.Board("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
    assert selector.balanced_move(board).uci() == "d1d5"


def test_balanced_plays_for_black_too(selector):
    board = chess.Board("3rk3/8/8/8/8/8/8/3QK3 b - - 0 1")
    # the rook trade still nets black the queen
    assert selector.balanced_move(board).uci() == "d8d1"


def test_balanced_falls_back_to_random(selector, monkeypatch):
    monkeypatch.setattr(
        selector.search, "search", lambda board, **kw: SearchResult(None, 0, 0)
    )
    board = chess.Board()
    assert selector.balanced_move(board) in rules.legal_moves(board)


def test_selection_failure_degrades_to_random(selector, monkeypatch):
    def boom(board):
        raise RuntimeError("search exploded")

    monkeypatch.setattr(selector, "balanced_move", boom)
    board = chess.Board()
    move = selector.select_move(Tier.BALANCED, board).result(timeout=1)
    assert move in rules.legal_moves(board)


def test_strong_runs_in_background(selector):
    board = chess.Board()
    future = selector.select_move(Tier.STRONG, board)
    assert future.result(timeout=5) in rules.legal_moves(board)


def test_strong_worker_failure_falls_back(selector, monkeypatch):
    def broken(*args):
        raise RuntimeError("engine crashed")

    monkeypatch.setattr(strategy, "_think", broken)
    board = chess.Board()
    assert selector.select_move(Tier.STRONG, board).result(timeout=5) in rules.legal_moves(board)


def test_strong_unavailable_worker_falls_back(selector, monkeypatch):
    dead = ThreadPoolExecutor(max_workers=1)
    dead.shutdown()
    monkeypatch.setattr(selector, "_pool", lambda: dead)
    board = chess.Board()
    future = selector.select_move(Tier.STRONG, board)
    assert future.done()
    assert future.result() in rules.legal_moves(board)


def test_default_think_time_window():
    s = MoveSelector(config=StrategyConfig(seed=11))
    delays = [s.think_delay() for _ in range(500)]
    assert all(1.0 <= d < 2.0 for d in delays)
    assert max(delays) - min(delays) > 0.5
