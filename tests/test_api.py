"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

import time

from fastapi.testclient import TestClient

from tictactoe import ui
from tictactoe.ui import app


client = TestClient(app)
ui.AI_THINK_DELAY = 0.0


def _new_game(**payload):
    response = client.post("/api/game", json=payload)
    assert response.status_code == 200
    return response.json()


def _move(game_id: str, index: int):
    return client.post(f"/api/game/{game_id}/move", json={"index": index})


def test_create_game_and_computer_replies():
    payload = _new_game(mode="1p", difficulty="hard")
    assert payload["currentPlayer"] == "X"
    assert payload["board"] == [""] * 9
    assert payload["moveLog"] == []
    assert payload["scores"] == {"X": 0, "O": 0}
    assert payload["status"] == "X's Turn"

    game_id = payload["id"]
    move_response = _move(game_id, 0)
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["board"][0] == "X"
    assert state["moveLog"][0] == {"player": "X", "index": 0}
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True

    time.sleep(0.01)
    follow_up = client.get(f"/api/game/{game_id}")
    assert follow_up.status_code == 200
    final_state = follow_up.json()
    assert final_state["currentPlayer"] == "X"
    assert final_state["aiPending"] is False
    assert final_state["lastMove"]["player"] == "O"
    # The only non-losing reply to a corner opening is the centre.
    assert final_state["board"][4] == "O"


def test_two_player_game_tracks_winner_and_scores():
    game_id = _new_game(mode="2p")["id"]
    state = None
    for index in (0, 3, 1, 4, 2):
        response = _move(game_id, index)
        assert response.status_code == 200
        state = response.json()
        assert state["aiPending"] is False

    assert state["winner"] == "X"
    assert state["winningLine"] == [0, 1, 2]
    assert state["scores"] == {"X": 1, "O": 0}
    assert state["status"] == "X Wins!"
    assert state["availableMoves"] == []

    finished = _move(game_id, 8)
    assert finished.status_code == 400


def test_two_player_draw():
    game_id = _new_game(mode="2p")["id"]
    for index in (0, 1, 2, 4, 3, 5, 7, 6, 8):
        state = _move(game_id, index).json()
    assert state["drawn"] is True
    assert state["winner"] is None
    assert state["status"] == "Game Draw!"
    assert state["scores"] == {"X": 0, "O": 0}


def test_restart_keeps_scores_and_switches_mode():
    game_id = _new_game(mode="2p")["id"]
    for index in (0, 3, 1, 4, 2):
        _move(game_id, index)

    response = client.post(
        f"/api/game/{game_id}/restart", json={"mode": "1p", "difficulty": "easy"}
    )
    assert response.status_code == 200
    state = response.json()
    assert state["mode"] == "1p"
    assert state["difficulty"] == "easy"
    assert state["board"] == [""] * 9
    assert state["moveLog"] == []
    assert state["winner"] is None
    assert state["scores"] == {"X": 1, "O": 0}


def test_invalid_move_rejected():
    game_id = _new_game(mode="2p")["id"]
    assert _move(game_id, 0).status_code == 200

    duplicate_move = _move(game_id, 0)
    assert duplicate_move.status_code == 400
    assert duplicate_move.json()["detail"]


def test_rejects_out_of_range_index():
    game_id = _new_game()["id"]
    assert _move(game_id, 9).status_code == 422


def test_rejects_unsupported_difficulty():
    response = client.post("/api/game", json={"difficulty": "impossible"})
    assert response.status_code == 422


def test_rejects_unsupported_mode():
    response = client.post("/api/game", json={"mode": "online"})
    assert response.status_code == 422


def test_missing_game_returns_404():
    assert client.get("/api/game/missing").status_code == 404
    assert _move("missing", 0).status_code == 404


def test_index_serves_page():
    response = client.get("/")
    assert response.status_code == 200
    assert "Tic Tac Toe" in response.text


def _board_from(text: str):
    return [" " if c == "." else c for c in text]


def test_human_win_in_single_player():
    game_id = _new_game(mode="1p")["id"]
    ui.SESSIONS[game_id].game.board = _board_from("XX.OO....")

    state = _move(game_id, 2).json()
    assert state["winner"] == "X"
    assert state["status"] == "You Win!"
    assert state["scores"] == {"X": 1, "O": 0}
    assert state["aiPending"] is False


def test_computer_win_in_single_player():
    game_id = _new_game(mode="1p", difficulty="hard")["id"]
    # O threatens the middle row; X leaves it open.
    ui.SESSIONS[game_id].game.board = _board_from("X..OO...X")

    assert _move(game_id, 7).status_code == 200
    time.sleep(0.01)
    state = client.get(f"/api/game/{game_id}").json()
    assert state["winner"] == "O"
    assert state["winningLine"] == [3, 4, 5]
    assert state["status"] == "AI Wins!"
    assert state["scores"] == {"X": 0, "O": 1}
    assert state["lastMove"] == {"player": "O", "index": 5}


def test_easy_difficulty_plays_a_legal_reply():
    payload = _new_game(mode="1p", difficulty="easy")
    game_id = payload["id"]
    assert payload["difficulty"] == "easy"
    assert ui.SESSIONS[game_id].ai.difficulty == "easy"

    _move(game_id, 4)
    time.sleep(0.01)
    state = client.get(f"/api/game/{game_id}").json()
    assert state["aiPending"] is False
    assert state["currentPlayer"] == "X"
    assert state["board"].count("O") == 1
    assert state["board"][4] == "X"


def test_restart_discards_queued_computer_turn():
    game_id = _new_game(mode="1p")["id"]
    session = ui.SESSIONS[game_id]
    # Apply the human move without running the scheduled computer turn.
    ui._apply_player_move(game_id, session, 0)
    assert session.ai_pending is True

    state = client.post(f"/api/game/{game_id}/restart", json={}).json()
    assert state["aiPending"] is False
    assert state["board"] == [""] * 9

    ui._run_ai_turn(game_id)
    state = client.get(f"/api/game/{game_id}").json()
    assert state["board"] == [""] * 9
    assert state["currentPlayer"] == "X"
    assert state["moveLog"] == []
    assert state["aiPending"] is False
