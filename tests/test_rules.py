from __future__ import annotations

import chess
import pytest

from chessduel import rules
from chessduel.exceptions import IllegalMoveError, InvalidCodeError
from chessduel.models import Color, Move


def _walk(plies: int) -> list:
    board = rules.starting_position()
    seen = [board]
    for i in range(plies):
        moves = rules.legal_moves(board)
        if not moves:
            break
        board = rules.apply_move(board, moves[(i * 7) % len(moves)])
        seen.append(board)
    return seen


def test_codec_round_trip_keeps_turn_and_legal_moves():
    for position in _walk(24):
        decoded = rules.decode(rules.encode(position))
        assert rules.turn_of(decoded) == rules.turn_of(position)
        assert set(rules.legal_moves(decoded)) == set(rules.legal_moves(position))


def test_apply_move_returns_new_position():
    start = rules.starting_position()
    after = rules.apply_move(start, Move("e2", "e4"))
    assert start.fen() == chess.STARTING_FEN
    assert rules.turn_of(after) == Color.BLACK
    assert after.piece_at(chess.E4) == chess.Piece(chess.PAWN, chess.WHITE)


def test_illegal_move_raises_and_leaves_position():
    start = rules.starting_position()
    with pytest.raises(IllegalMoveError):
        rules.apply_move(start, Move("e2", "e5"))
    with pytest.raises(IllegalMoveError):
        rules.apply_move(start, Move("zz", "e5"))
    assert start.fen() == chess.STARTING_FEN


def test_missing_promotion_piece_means_queen():
    board = rules.decode("8/4P3/8/8/8/8/k7/7K w - - 0 1")
    after = rules.apply_move(board, Move("e7", "e8"))
    assert after.piece_at(chess.E8) == chess.Piece(chess.QUEEN, chess.WHITE)
    assert Move.from_chess(after.peek()).promotion == "q"


def test_legal_moves_from_square():
    start = rules.starting_position()
    assert {m.to_square for m in rules.legal_moves(start, "e2")} == {"e3", "e4"}
    assert {m.to_square for m in rules.legal_moves(start, "g1")} == {"f3", "h3"}
    assert rules.legal_moves(start, "e4") == []
    assert rules.legal_moves(start, "x9") == []


@pytest.mark.parametrize(
    "code",
    [
        "",
        "   ",
        "not a position",
        "8/8/8/8/8/8/8/8 w - - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",
    ],
)
def test_decode_rejects_bad_codes(code):
    with pytest.raises(InvalidCodeError):
        rules.decode(code)


def test_decode_strips_whitespace():
    board = rules.decode(f"  {chess.STARTING_FEN}\n")
    assert board.fen() == chess.STARTING_FEN


def test_terminal_conditions():
    mate = rules.decode("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")
    assert rules.is_checkmate(mate) and rules.is_check(mate) and rules.is_terminal(mate)

    stalemate = rules.decode("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert rules.is_stalemate(stalemate) and rules.is_terminal(stalemate)

    bare_kings = rules.decode("8/8/8/8/8/8/k7/7K w - - 0 1")
    assert rules.is_draw(bare_kings) and rules.is_terminal(bare_kings)

    fifty = rules.decode("4k3/8/8/8/8/8/8/R3K3 w - - 100 80")
    assert rules.is_draw(fifty)

    assert not rules.is_terminal(rules.starting_position())


def test_threefold_repetition_is_a_draw():
    board = rules.starting_position()
    for uci in ["g1f3", "g8f6", "f3g1", "f6g8"] * 2:
        board = rules.apply_move(board, Move.from_uci(uci))
    assert rules.is_draw(board)
