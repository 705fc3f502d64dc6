from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Set

import chess

from . import rules, sync
from .config import CONFIG, Config
from .exceptions import IllegalMoveError, InvalidCodeError
from .models import Color, HistoryEntry, Mode, Move, Phase, Session, Theme, Tier
from .notifications import Notifications
from .search import SearchEngine
from .strategy import MoveSelector
from .sync import SyncOutcome

log = logging.getLogger("chessduel")

Listener = Callable[[Dict[str, object]], None]


class Game:
    """Owns the current session and decides which inputs are accepted.

    Every change replaces ``self.session`` with a new ``Session`` under the
    lock. Sessions installed by reset, mode change or an adopted remote code
    get a fresh generation number; an AI computation remembers the generation
    it was started for and its result is dropped if that generation is gone.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        selector: Optional[MoveSelector] = None,
        start: bool = True,
    ) -> None:
        self.config = config or CONFIG
        self.selector = selector or MoveSelector(
            SearchEngine(depth=self.config.search.depth), self.config.strategy
        )
        self.notifications = Notifications(
            self.config.ui.notification_ttl_s, on_expire=self._publish
        )
        self.theme = Theme(self.config.ui.theme)
        self.session: Optional[Session] = None

        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._generation = 0
        self._pending: Optional[Future] = None
        self._idle = threading.Event()
        self._idle.set()

        if start:
            self.reset()

    # ------------------------------------------------------------------ state

    @property
    def phase(self) -> Phase:
        with self._lock:
            session = self.session
            if session is None:
                return Phase.IDLE
            return Phase.TERMINAL if rules.is_terminal(session.position) else Phase.ACTIVE

    @property
    def busy(self) -> bool:
        with self._lock:
            return self.session is not None and self.session.busy

    @property
    def pending(self) -> Optional[Future]:
        with self._lock:
            return self._pending

    @property
    def position(self) -> Optional[chess.Board]:
        with self._lock:
            return self.session.position if self.session else None

    def is_human_turn(self) -> bool:
        with self._lock:
            session = self.session
            if session is None:
                return False
            if session.mode == Mode.LOCAL:
                return True
            return rules.turn_of(session.position) == session.player_color

    # -------------------------------------------------------------- lifecycle

    def reset(self) -> None:
        """Back to the starting position, keeping the current mode and tier."""
        session = self.session
        self.new_game(
            mode=session.mode if session else None,
            tier=session.tier if session else None,
        )

    def new_game(
        self,
        mode: Optional[Mode] = None,
        tier: Optional[Tier] = None,
        player_color: Optional[Color] = None,
    ) -> None:
        start = rules.starting_position()
        with self._lock:
            self._install(
                Session(
                    position=start,
                    mode=mode or Mode(self.config.default_mode),
                    tier=tier or Tier(self.config.default_tier),
                    player_color=player_color or Color.WHITE,
                    initial_position=start,
                )
            )
        log.info("New %s game, player is %s", self.session.mode.value, self.session.player_color.label)
        self._publish()
        self._request_ai_move()

    def set_mode(self, mode: Mode) -> None:
        self.new_game(mode=mode, tier=self.session.tier if self.session else None)

    def set_tier(self, tier: Tier) -> None:
        with self._lock:
            if self.session is None:
                return
            self.session = replace(self.session, tier=tier)
        self._publish()

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme
        self._publish()

    def toggle_theme(self) -> Theme:
        self.set_theme(Theme.DARK if self.theme == Theme.LIGHT else Theme.LIGHT)
        return self.theme

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return self._idle.wait(timeout)

    def close(self) -> None:
        self.selector.shutdown(wait=True)

    def _install(self, session: Session) -> None:
        # lock held; any computation still running belongs to the old generation
        self._generation += 1
        self.session = replace(session, busy=False, generation=self._generation)
        self._pending = None
        self._idle.set()

    # ------------------------------------------------------------------ moves

    def submit_move(self, move: Move) -> bool:
        """Apply a human move. Returns False and changes nothing if it is rejected."""
        with self._lock:
            session = self.session
            if session is None:
                log.debug("Rejected %s: no game", move)
                return False
            if session.busy:
                log.debug("Rejected %s: waiting for the AI", move)
                return False
            if not self.is_human_turn():
                log.debug("Rejected %s: not %s's turn", move, session.player_color.label)
                return False
            if self.phase == Phase.TERMINAL:
                log.debug("Rejected %s: game is over", move)
                return False
            try:
                self._accept(move)
                accepted = True
            except IllegalMoveError as exc:
                log.debug("Rejected %s: %s", move, exc)
                self.notifications.post("Illegal move.")
                accepted = False
            if accepted and self.session.mode == Mode.REMOTE:
                self.notifications.post("New game code ready. Send it to your friend!")
        self._publish()
        if not accepted:
            return False
        self._request_ai_move()
        return True

    def on_user_move_intent(self, from_square: str, to_square: str) -> bool:
        return self.submit_move(Move(from_square, to_square))

    def on_square_selected(self, square: str) -> Set[str]:
        """Destination squares for the piece on ``square``, if the human may move it."""
        with self._lock:
            session = self.session
            if session is None or session.busy or not self.is_human_turn():
                return set()
            if self.phase == Phase.TERMINAL:
                return set()
            try:
                piece = session.position.piece_at(chess.parse_square(square))
            except ValueError:
                return set()
            if piece is None or piece.color != session.position.turn:
                return set()
            return {m.to_square for m in rules.legal_moves(session.position, square)}

    def _accept(self, move: Move) -> None:
        # lock held; raises IllegalMoveError before touching anything
        session = self.session
        position = rules.apply_move(session.position, move)
        played = Move.from_chess(position.peek())
        session = replace(
            session,
            position=position,
            history=session.history + (HistoryEntry(position, played),),
        )
        if session.mode == Mode.REMOTE:
            session = sync.republish(session)
        self.session = session
        log.debug("Played %s, %s to move", played.uci(), rules.turn_of(position).label)

    def undo(self) -> bool:
        with self._lock:
            session = self.session
            if session is None or session.mode == Mode.REMOTE:
                return False
            if session.busy or not session.history or self.phase == Phase.TERMINAL:
                return False
            count = 2 if session.mode == Mode.AI else 1
            history = session.history[: -min(count, len(session.history))]
            position = history[-1].position if history else session.initial_position
            self.session = replace(session, position=position, history=history)
        self._publish()
        self._request_ai_move()
        return True

    # --------------------------------------------------------------------- AI

    def _needs_ai_move(self, session: Session) -> bool:
        return (
            session.mode == Mode.AI
            and not session.busy
            and rules.turn_of(session.position) != session.player_color
            and not rules.is_terminal(session.position)
        )

    def _request_ai_move(self) -> None:
        with self._lock:
            session = self.session
            if session is None or not self._needs_ai_move(session):
                return
            generation = session.generation
            board = session.position.copy()
            tier = session.tier
            self.session = replace(session, busy=True)
            self._idle.clear()
        log.info("AI (%s) thinking for %s", tier.value, rules.turn_of(board).label)
        self._publish()

        try:
            future = self.selector.select_move(tier, board)
        except Exception as exc:
            log.warning("AI selection could not start (%s); playing a random move", exc)
            future = Future()
            future.set_result(self.selector.random_move(board))
        with self._lock:
            if generation == self._generation:
                self._pending = future
        future.add_done_callback(lambda f: self._on_ai_move(generation, board, f))

    def _on_ai_move(self, generation: int, board: chess.Board, future: Future) -> None:
        try:
            move = future.result()
        except Exception as exc:
            log.warning("AI selection failed (%s); playing a random move", exc)
            move = self.selector.random_move(board)

        with self._lock:
            session = self.session
            if session is None or generation != self._generation or not session.busy:
                log.info("Discarding AI move %s from generation %d", move, generation)
                return
            self.session = replace(session, busy=False)
            self._pending = None
            if move is None:
                log.warning("AI found no move in a live position: %s", rules.encode(board))
            else:
                try:
                    self._accept(move)
                    log.info("AI played %s", move.uci())
                except IllegalMoveError as exc:
                    log.warning("AI move rejected: %s", exc)
                    self.notifications.post("The AI could not find a move.")
            self._idle.set()
        self._publish()

    # ----------------------------------------------------------------- remote

    def create_remote_game(self) -> SyncOutcome:
        with self._lock:
            tier = self.session.tier if self.session else Tier(self.config.default_tier)
            self._install(sync.create_session(tier))
            self.notifications.post("New game created! Send the code to your friend.")
        self._publish()
        return SyncOutcome.CREATED

    def join_remote_game(self, code: str) -> SyncOutcome:
        with self._lock:
            tier = self.session.tier if self.session else Tier(self.config.default_tier)
            try:
                session = sync.join_session(code, tier)
            except InvalidCodeError as exc:
                log.info("Join rejected: %s", exc)
                self.notifications.post("Invalid Game Code.")
                outcome = SyncOutcome.REJECTED
            else:
                self._install(session)
                self.notifications.post("Game joined! It's your turn.")
                log.info("Joined remote game as %s", session.player_color.label)
                outcome = SyncOutcome.JOINED
        self._publish()
        return outcome

    def sync_remote_game(self, code: str) -> SyncOutcome:
        with self._lock:
            outcome = self._sync_locked(code)
        self._publish()
        return outcome

    def _sync_locked(self, code: str) -> SyncOutcome:
        session = self.session
        if session is None or session.mode != Mode.REMOTE:
            self.notifications.post("Create or join a game first.")
            return SyncOutcome.REJECTED
        try:
            adopted = sync.sync_session(session, code)
        except InvalidCodeError as exc:
            log.info("Sync rejected: %s", exc)
            self.notifications.post("Invalid code from friend.")
            return SyncOutcome.REJECTED
        if adopted is None:
            self.notifications.post("This is the current game state.")
            return SyncOutcome.ALREADY_CURRENT
        self._install(adopted)
        if self.is_human_turn():
            self.notifications.post("Board updated! It's your turn.")
        else:
            self.notifications.post("Board updated.")
        return SyncOutcome.SYNCED

    # ----------------------------------------------------------- presentation

    def status_text(self) -> str:
        with self._lock:
            if self.session is None:
                return ""
            board = self.session.position
            side = rules.turn_of(board)
            status = f"Turn: {side.label}"
            if rules.is_checkmate(board):
                return f"CHECKMATE! {side.opponent.label} wins."
            if rules.is_stalemate(board):
                return "STALEMATE!"
            if rules.is_draw(board):
                return "DRAW!"
            if rules.is_check(board):
                return f"CHECK! {status}"
            return status

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            session = self.session
            if session is None:
                return {"phase": Phase.IDLE.value, "theme": self.theme.value}
            board = session.position
            in_check = board.is_check()
            check_square: Optional[str] = None
            if in_check:
                king_sq = board.king(board.turn)
                if king_sq is not None:
                    check_square = chess.SQUARE_NAMES[king_sq]
            last = session.last_move
            return {
                "fen": rules.encode(board),
                "code": session.published_code,
                "turn": rules.turn_of(board).value,
                "status": self.status_text(),
                "phase": self.phase.value,
                "busy": session.busy,
                "mode": session.mode.value,
                "tier": session.tier.value,
                "player_color": session.player_color.value,
                "theme": self.theme.value,
                "history": [{"fen": e.fen, "move": e.move.uci()} for e in session.history],
                "last_move": last.uci() if last else None,
                "in_check": in_check,
                "check_square": check_square,
                "legal_moves": [m.uci() for m in rules.legal_moves(board)],
                "notifications": self.notifications.active(),
            }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
            if not listeners:
                return
            snap = self.snapshot()
        for listener in listeners:
            try:
                listener(snap)
            except Exception:
                log.exception("Listener %r failed", listener)
