from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import chess


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def label(self) -> str:
        return "White" if self is Color.WHITE else "Black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @classmethod
    def from_chess(cls, color: chess.Color) -> "Color":
        return cls.WHITE if color == chess.WHITE else cls.BLACK


class Mode(str, Enum):
    AI = "AI"
    LOCAL = "LOCAL"
    REMOTE = "REMOTE"


class Tier(str, Enum):
    RANDOM = "RANDOM"
    BALANCED = "BALANCED"
    STRONG = "STRONG"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class Phase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class Move:
    from_square: str
    to_square: str
    promotion: Optional[str] = None

    def uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"

    def to_chess(self) -> chess.Move:
        return chess.Move.from_uci(self.uci())

    @classmethod
    def from_chess(cls, move: chess.Move) -> "Move":
        promotion = chess.piece_symbol(move.promotion) if move.promotion else None
        return cls(
            chess.SQUARE_NAMES[move.from_square],
            chess.SQUARE_NAMES[move.to_square],
            promotion,
        )

    @classmethod
    def from_uci(cls, uci: str) -> "Move":
        return cls.from_chess(chess.Move.from_uci(uci))

    def __str__(self) -> str:
        return f"{self.from_square}-{self.to_square}"


@dataclass(frozen=True)
class HistoryEntry:
    """A move and the position it produced. ``position`` is never mutated."""

    position: chess.Board
    move: Move

    @property
    def fen(self) -> str:
        return self.position.fen()


@dataclass(frozen=True)
class Session:
    """Everything one game needs. Replaced, never edited in place."""

    position: chess.Board
    mode: Mode
    tier: Tier
    player_color: Color
    initial_position: chess.Board
    history: Tuple[HistoryEntry, ...] = ()
    published_code: Optional[str] = None
    busy: bool = False
    generation: int = 0

    @property
    def last_move(self) -> Optional[Move]:
        return self.history[-1].move if self.history else None
