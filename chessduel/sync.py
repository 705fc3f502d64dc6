"""Turn-by-turn play between two peers without a connection.

The only payload is the position code (a FEN string). Each side pastes the
code it received from the other side; adopting a code always replaces the
local session outright. Nothing is merged and the last code wins.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Optional

from . import rules
from .models import Color, Mode, Session, Tier


class SyncOutcome(str, Enum):
    CREATED = "created"
    JOINED = "joined"
    SYNCED = "synced"
    ALREADY_CURRENT = "already_current"
    REJECTED = "rejected"


def create_session(tier: Tier) -> Session:
    """New game from the standard start; the creator plays the first move."""
    start = rules.starting_position()
    return Session(
        position=start,
        mode=Mode.REMOTE,
        tier=tier,
        player_color=Color.WHITE,
        initial_position=start,
        published_code=rules.encode(start),
    )


def join_session(code: str, tier: Tier) -> Session:
    """Session for a received code. The joiner plays whichever side is to move.

    Raises InvalidCodeError without building anything if the code does not decode.
    """
    board = rules.decode(code)
    return Session(
        position=board,
        mode=Mode.REMOTE,
        tier=tier,
        player_color=rules.turn_of(board),
        initial_position=board,
        published_code=code.strip(),
    )


def sync_session(session: Session, code: str) -> Optional[Session]:
    """Adopt the peer's position, or return None when ``code`` is what we last published."""
    text = (code or "").strip()
    if session.published_code is not None and text == session.published_code:
        return None
    board = rules.decode(text)
    # only snapshots travel between peers, so history cannot be rebuilt
    return replace(
        session,
        position=board,
        initial_position=board,
        history=(),
        published_code=text,
        busy=False,
    )


def republish(session: Session) -> Session:
    return replace(session, published_code=rules.encode(session.position))
