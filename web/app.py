from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Type, TypeVar

from flask import Flask, jsonify, request

from chessduel import Color, Game, Mode, Move, SyncOutcome, Theme, Tier
from chessduel.config import CONFIG, Config

log = logging.getLogger("chessduel")

E = TypeVar("E", bound=Enum)


def _enum(kind: Type[E], raw: object) -> Optional[E]:
    if raw is None:
        return None
    text = str(raw)
    for member in kind:
        if text == member.value or text.upper() == member.name:
            return member
    raise ValueError(f"Unknown {kind.__name__.lower()}: {raw}")


def create_app(config: Optional[Config] = None, game: Optional[Game] = None) -> Flask:
    app = Flask(__name__)
    config = config or CONFIG
    game = game or Game(config)
    app.extensions["chessduel.game"] = game

    def state(status: int = 200):
        return jsonify(game.snapshot()), status

    def error(message: str):
        snap = game.snapshot()
        snap["error"] = message
        return jsonify(snap), 400

    @app.get("/api/state")
    def api_state():
        return state()

    @app.post("/api/new")
    def api_new():
        data = request.get_json(silent=True) or {}
        try:
            mode = _enum(Mode, data.get("mode"))
            tier = _enum(Tier, data.get("tier"))
            color = _enum(Color, data.get("color"))
        except ValueError as exc:
            return error(str(exc))
        game.new_game(mode=mode, tier=tier, player_color=color)
        return state()

    @app.post("/api/move")
    def api_move():
        payload = request.get_json(silent=True) or {}
        uci = payload.get("move")
        if uci:
            try:
                move = Move.from_uci(uci)
            except ValueError:
                return error(f"Invalid move: {uci}")
            accepted = game.submit_move(move)
        elif payload.get("from") and payload.get("to"):
            accepted = game.on_user_move_intent(payload["from"], payload["to"])
        else:
            return error("Missing move")
        if not accepted:
            return error("Move rejected")
        return state()

    @app.post("/api/select")
    def api_select():
        payload = request.get_json(silent=True) or {}
        square = payload.get("square")
        if not square:
            return error("Missing square")
        snap = game.snapshot()
        snap["targets"] = sorted(game.on_square_selected(square))
        return jsonify(snap)

    @app.post("/api/undo")
    def api_undo():
        if not game.undo():
            return error("Nothing to undo")
        return state()

    @app.post("/api/mode")
    def api_mode():
        payload = request.get_json(silent=True) or {}
        try:
            mode = _enum(Mode, payload.get("mode"))
        except ValueError as exc:
            return error(str(exc))
        if mode is None:
            return error("Missing mode")
        game.set_mode(mode)
        return state()

    @app.post("/api/tier")
    def api_tier():
        payload = request.get_json(silent=True) or {}
        try:
            tier = _enum(Tier, payload.get("tier"))
        except ValueError as exc:
            return error(str(exc))
        if tier is None:
            return error("Missing tier")
        game.set_tier(tier)
        return state()

    @app.post("/api/theme")
    def api_theme():
        payload = request.get_json(silent=True) or {}
        try:
            theme = _enum(Theme, payload.get("theme"))
        except ValueError as exc:
            return error(str(exc))
        if theme is None:
            game.toggle_theme()
        else:
            game.set_theme(theme)
        return state()

    @app.post("/api/remote/create")
    def api_remote_create():
        game.create_remote_game()
        return state()

    @app.post("/api/remote/join")
    def api_remote_join():
        payload = request.get_json(silent=True) or {}
        if game.join_remote_game(payload.get("code") or "") is SyncOutcome.REJECTED:
            return error("Invalid game code")
        return state()

    @app.post("/api/remote/sync")
    def api_remote_sync():
        payload = request.get_json(silent=True) or {}
        outcome = game.sync_remote_game(payload.get("code") or "")
        if outcome is SyncOutcome.REJECTED:
            return error("Invalid code from friend")
        snap = game.snapshot()
        snap["outcome"] = outcome.value
        return jsonify(snap)

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=CONFIG.log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    app = create_app()
    app.run(host=CONFIG.ui.host, port=CONFIG.ui.port, debug=True)
