from __future__ import annotations

from chessduel.config import Config
from web import create_app


def main() -> None:
    app = create_app(Config())
    client = app.test_client()

    # new game against the search-based AI
    resp = client.post("/api/new", json={"mode": "AI", "tier": "BALANCED"})
    assert resp.status_code == 200, resp.data
    data = resp.get_json()
    assert "fen" in data and "legal_moves" in data

    # make a move and have AI reply
    resp = client.post("/api/move", json={"from": "e2", "to": "e4"})
    assert resp.status_code == 200, resp.data
    data = resp.get_json()
    assert len(data["history"]) == 2, data
    print("Smoke OK. AI replied:", data["last_move"])


if __name__ == "__main__":
    main()
