"""Thin adapter over python-chess.

Positions are ``chess.Board`` objects that this package never mutates once
they have been handed out: ``apply_move`` works on a copy. The position code
exchanged between peers is the FEN string.
"""

from __future__ import annotations

from typing import List, Optional

import chess

from .exceptions import IllegalMoveError, InvalidCodeError
from .models import Color, Move


def starting_position() -> chess.Board:
    return chess.Board()


def legal_moves(position: chess.Board, square: Optional[str] = None) -> List[Move]:
    """Legal moves in python-chess enumeration order, optionally from one square."""
    if square is None:
        return [Move.from_chess(m) for m in position.legal_moves]
    try:
        from_sq = chess.parse_square(square)
    except ValueError:
        return []
    return [
        Move.from_chess(m)
        for m in position.generate_legal_moves(from_mask=chess.BB_SQUARES[from_sq])
    ]


def apply_move(position: chess.Board, move: Move) -> chess.Board:
    """Return the position after ``move``; raise IllegalMoveError otherwise."""
    try:
        candidate = move.to_chess()
    except ValueError as exc:
        raise IllegalMoveError(f"Illegal move: {move.uci()}") from exc

    if candidate not in position.legal_moves:
        candidate = _auto_queen(position, candidate)
        if candidate is None:
            raise IllegalMoveError(f"Illegal move: {move.uci()}")

    child = position.copy()
    child.push(candidate)
    return child


def _auto_queen(position: chess.Board, move: chess.Move) -> Optional[chess.Move]:
    # e7e8 without a suffix means a queen promotion
    if move.promotion is not None:
        return None
    piece = position.piece_at(move.from_square)
    if piece is None or piece.piece_type != chess.PAWN:
        return None
    to_rank = chess.square_rank(move.to_square)
    if (piece.color == chess.WHITE and to_rank == 7) or (
        piece.color == chess.BLACK and to_rank == 0
    ):
        promo_move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        if promo_move in position.legal_moves:
            return promo_move
    return None


def is_check(position: chess.Board) -> bool:
    return position.is_check()


def is_checkmate(position: chess.Board) -> bool:
    return position.is_checkmate()


def is_stalemate(position: chess.Board) -> bool:
    return position.is_stalemate()


def is_draw(position: chess.Board) -> bool:
    return (
        position.is_insufficient_material()
        or position.halfmove_clock >= 100
        or position.is_repetition(3)
        or position.is_seventyfive_moves()
        or position.is_fivefold_repetition()
    )


def is_terminal(position: chess.Board) -> bool:
    return is_checkmate(position) or is_stalemate(position) or is_draw(position)


def turn_of(position: chess.Board) -> Color:
    return Color.from_chess(position.turn)


def encode(position: chess.Board) -> str:
    return position.fen()


def decode(code: str) -> chess.Board:
    """Parse a position code. Raises InvalidCodeError on anything unusable."""
    text = (code or "").strip()
    if not text:
        raise InvalidCodeError("Empty game code")
    try:
        board = chess.Board(fen=text)
    except ValueError as exc:
        raise InvalidCodeError(f"Invalid game code: {text}") from exc
    if not board.is_valid():
        raise InvalidCodeError(f"Invalid game code: {text}")
    return board
