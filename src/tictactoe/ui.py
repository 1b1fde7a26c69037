"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import threading

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from .ai import DIFFICULTIES, ComputerPlayer
from .game import EMPTY, Player, TicTacToeGame


logger = logging.getLogger(__name__)

HUMAN_PLAYER: Player = "X"
COMPUTER_PLAYER: Player = "O"
MODES: Tuple[str, ...] = ("1p", "2p")
AI_THINK_DELAY: float = 0.3


@dataclass
class GameSession:
    """Container for an active game, its scores and the optional computer opponent."""

    game: TicTacToeGame
    mode: str = "1p"
    difficulty: str = "hard"
    ai: Optional[ComputerPlayer] = None
    scores: Dict[str, int] = field(default_factory=lambda: {"X": 0, "O": 0})
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def configure(self, mode: str, difficulty: str) -> None:
        self.mode = mode
        self.difficulty = difficulty
        self.ai = (
            ComputerPlayer(player=COMPUTER_PLAYER, difficulty=difficulty)
            if mode == "1p"
            else None
        )


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic Tac Toe", description="Tic-tac-toe played in the browser")


def _check_mode(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in MODES:
        raise ValueError(f"Unsupported mode {value}. Choose one of {', '.join(MODES)}.")
    return value


def _check_difficulty(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in DIFFICULTIES:
        raise ValueError(
            f"Unsupported difficulty {value}. "
            f"Choose one of {', '.join(DIFFICULTIES)}."
        )
    return value


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: str = Field(default="1p", description="'1p' against the computer or '2p'")
    difficulty: str = Field(default="hard", description="Computer strength in 1p mode")

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _check_mode(value)

    @field_validator("difficulty")
    @classmethod
    def ensure_supported_difficulty(cls, value: str) -> str:
        return _check_difficulty(value)


class RestartRequest(BaseModel):
    """Request payload for restarting, optionally switching mode or difficulty."""

    mode: Optional[str] = None
    difficulty: Optional[str] = None

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: Optional[str]) -> Optional[str]:
        return _check_mode(value)

    @field_validator("difficulty")
    @classmethod
    def ensure_supported_difficulty(cls, value: Optional[str]) -> Optional[str]:
        return _check_difficulty(value)


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    index: int = Field(ge=0, le=8, description="Row-major cell index")


def _create_session(mode: str, difficulty: str) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(game=TicTacToeGame())
    session.configure(mode, difficulty)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created game %s (mode=%s, difficulty=%s)", session_id, mode, difficulty)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _record_move(game_id: str, session: GameSession, player: Player, index: int) -> None:
    """Append to the move log and credit the winner once the game ends."""

    session.move_log.append({"player": player, "index": index})
    game = session.game
    if game.winner:
        session.scores[game.winner] += 1
        logger.info("Game %s won by %s on line %s", game_id, game.winner, game.line)
    elif game.drawn:
        logger.info("Game %s ended in a draw", game_id)


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        try:
            if not session.ai:
                return
            game = session.game
            if game.is_over():
                return
            if game.current_player != session.ai.player:
                return
            index = session.ai.choose(game)
            game.play_move(index)
            logger.debug("Computer (%s) played %d in game %s", session.difficulty, index, game_id)
            _record_move(game_id, session, session.ai.player, index)
        finally:
            session.ai_pending = False


def _status_text(session: GameSession) -> str:
    game = session.game
    if game.winner:
        if session.mode == "1p":
            return "You Win!" if game.winner == HUMAN_PLAYER else "AI Wins!"
        return f"{game.winner} Wins!"
    if game.drawn:
        return "Game Draw!"
    return f"{game.current_player}'s Turn"


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode,
            "difficulty": session.difficulty,
            "board": [c if c != EMPTY else "" for c in game.board],
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "winningLine": list(game.line),
            "drawn": game.drawn,
            "scores": dict(session.scores),
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "status": _status_text(session),
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.is_over():
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.ai and game.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is the computer's turn")

        player = game.current_player
        try:
            game.play_move(index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        _record_move(game_id, session, player, index)

        should_schedule_ai = bool(
            session.ai
            and not game.is_over()
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.difficulty)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str, request: RestartRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.configure(
            request.mode or session.mode,
            request.difficulty or session.difficulty,
        )
        session.game.restart()
        session.move_log.clear()
        # A computer turn still queued sees X to move and does nothing.
        session.ai_pending = False
    logger.info(
        "Restarted game %s (mode=%s, difficulty=%s)",
        game_id,
        session.mode,
        session.difficulty,
    )
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <link rel=\"preconnect\" href=\"https://fonts.googleapis.com\" />
    <link rel=\"preconnect\" href=\"https://fonts.gstatic.com\" crossorigin />
    <link
      href=\"https://fonts.googleapis.com/css2?family=Poppins:wght@400;500;600;700&display=swap\"
      rel=\"stylesheet\"
    />
    <style>
      :root {
        font-family: 'Poppins', system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        font-weight: 400;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        align-items: flex-start;
        padding: 2rem 1rem 3rem;
      }
      .app {
        width: 100%;
        display: flex;
        justify-content: center;
        transition: background 0.4s ease, color 0.4s ease;
      }
      .app.dark {
        --bg: #10162a;
        --card: #1b2340;
        --text: #e8ecff;
        --muted: rgba(232, 236, 255, 0.7);
        --cell: #25305a;
        --accent: #7c8cff;
        --highlight: #3ccf91;
      }
      .app.light {
        --bg: #dbe0ff;
        --card: rgba(255, 255, 255, 0.94);
        --text: #13203a;
        --muted: rgba(19, 32, 58, 0.7);
        --cell: #eef1ff;
        --accent: #4457ff;
        --highlight: #2fbf7f;
      }
      body:has(.app.dark) {
        background: #10162a;
      }
      body:has(.app.light) {
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
      }
      .card {
        position: relative;
        background: var(--card);
        color: var(--text);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(8, 14, 34, 0.25);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(460px, 100%);
      }
      .top-row,
      .controls-row,
      .score-row {
        display: flex;
        align-items: center;
        justify-content: space-between;
        gap: 0.75rem;
        margin-bottom: 1.25rem;
      }
      h1 {
        margin: 0;
        font-size: clamp(1.6rem, 2vw + 1rem, 2.2rem);
        letter-spacing: 0.04em;
      }
      .theme-switch {
        display: flex;
        align-items: center;
        gap: 0.5rem;
        color: var(--muted);
        font-size: 0.9rem;
      }
      .switch {
        position: relative;
        width: 44px;
        height: 24px;
      }
      .switch input {
        opacity: 0;
        width: 0;
        height: 0;
      }
      .slider {
        position: absolute;
        inset: 0;
        background: var(--cell);
        border-radius: 24px;
        cursor: pointer;
        transition: background 0.2s ease;
      }
      .slider::before {
        content: '';
        position: absolute;
        width: 18px;
        height: 18px;
        left: 3px;
        top: 3px;
        background: var(--accent);
        border-radius: 50%;
        transition: transform 0.2s ease;
      }
      .switch input:checked + .slider::before {
        transform: translateX(20px);
      }
      button,
      select {
        font: inherit;
        border-radius: 10px;
        border: none;
        cursor: pointer;
      }
      .mode-btns {
        display: flex;
        gap: 0.5rem;
      }
      .mode-btn {
        padding: 0.45rem 0.9rem;
        background: var(--cell);
        color: var(--text);
      }
      .mode-btn.active {
        background: var(--accent);
        color: #fff;
      }
      select {
        padding: 0.45rem 0.7rem;
        background: var(--cell);
        color: var(--text);
      }
      .score {
        flex: 1;
        text-align: center;
        padding: 0.5rem;
        background: var(--cell);
        border-radius: 10px;
        font-weight: 600;
      }
      .game-area {
        position: relative;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.6rem;
      }
      .square {
        aspect-ratio: 1;
        font-size: clamp(2rem, 8vw, 3rem);
        font-weight: 700;
        background: var(--cell);
        color: var(--text);
        transition: transform 0.1s ease, background 0.2s ease;
      }
      .square:hover:not(:disabled) {
        transform: scale(1.03);
      }
      .square:disabled {
        cursor: default;
      }
      .square.highlight {
        background: var(--highlight);
        color: #fff;
      }
      .center-popup {
        position: absolute;
        inset: 0;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        background: rgba(8, 14, 34, 0.55);
        border-radius: 12px;
        color: #fff;
      }
      .center-popup h2 {
        margin: 0 0 1rem;
      }
      .play-again-btn,
      .restart-btn {
        padding: 0.6rem 1.2rem;
        background: var(--accent);
        color: #fff;
        font-weight: 600;
      }
      .status-row {
        text-align: center;
        margin: 1.25rem 0;
        font-weight: 500;
        color: var(--muted);
      }
      .restart-btn {
        width: 100%;
      }
      .hidden {
        display: none;
      }
    </style>
  </head>
  <body>
    <div id=\"app\" class=\"app dark\">
      <div class=\"card\">
        <div class=\"top-row\">
          <h1>Tic Tac Toe</h1>
          <div class=\"theme-switch\">
            <label class=\"switch\">
              <input id=\"theme-toggle\" type=\"checkbox\" checked />
              <span class=\"slider\"></span>
            </label>
            <span id=\"theme-label\">Dark</span>
          </div>
        </div>

        <div class=\"controls-row\">
          <div class=\"mode-btns\">
            <button class=\"mode-btn active\" data-mode=\"1p\">1 Player</button>
            <button class=\"mode-btn\" data-mode=\"2p\">2 Players</button>
          </div>
          <select id=\"difficulty\">
            <option value=\"easy\">Easy</option>
            <option value=\"hard\" selected>Hard</option>
          </select>
        </div>

        <div class=\"score-row\">
          <div class=\"score\" id=\"score-x\">X: 0</div>
          <div class=\"score\" id=\"score-o\">O: 0</div>
        </div>

        <div class=\"game-area\">
          <div class=\"board\" id=\"board\"></div>
          <div class=\"center-popup hidden\" id=\"popup\">
            <h2 id=\"popup-title\"></h2>
            <button class=\"play-again-btn\" id=\"play-again\">Play Again</button>
          </div>
        </div>

        <div class=\"status-row\" id=\"status\">Loading…</div>

        <button class=\"restart-btn\" id=\"restart\">Restart Game</button>
      </div>
    </div>

    <script>
      const appEl = document.getElementById('app');
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const popupEl = document.getElementById('popup');
      const popupTitleEl = document.getElementById('popup-title');
      const scoreXEl = document.getElementById('score-x');
      const scoreOEl = document.getElementById('score-o');
      const difficultyEl = document.getElementById('difficulty');
      const themeToggle = document.getElementById('theme-toggle');
      const themeLabel = document.getElementById('theme-label');
      const modeButtons = document.querySelectorAll('.mode-btn');

      let gameState = null;
      let pollTimer = null;

      const squares = [];
      for (let i = 0; i < 9; i += 1) {
        const square = document.createElement('button');
        square.className = 'square';
        square.addEventListener('click', () => playMove(i));
        boardEl.appendChild(square);
        squares.push(square);
      }

      async function request(path, body) {
        const options = body === undefined
          ? {}
          : {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(body),
            };
        const response = await fetch(path, options);
        const payload = await response.json();
        if (!response.ok) {
          throw new Error(payload.detail || 'Request failed');
        }
        return payload;
      }

      function popupText(state) {
        if (state.winner) {
          return state.mode === '1p' && state.winner === 'X' ? '🎉 You Win!' : '🏆 Winner!';
        }
        return '🤝 Draw!';
      }

      function render() {
        if (!gameState) {
          return;
        }
        const line = new Set(gameState.winningLine);
        const open = new Set(gameState.availableMoves);
        const humanTurn = gameState.mode === '2p' || gameState.currentPlayer === 'X';
        squares.forEach((square, index) => {
          square.textContent = gameState.board[index];
          square.classList.toggle('highlight', line.has(index));
          square.disabled = !open.has(index) || !humanTurn || gameState.aiPending;
        });
        scoreXEl.textContent = `X: ${gameState.scores.X}`;
        scoreOEl.textContent = `O: ${gameState.scores.O}`;
        statusEl.textContent = gameState.aiPending ? 'AI is thinking…' : gameState.status;
        modeButtons.forEach((button) => {
          button.classList.toggle('active', button.dataset.mode === gameState.mode);
        });
        difficultyEl.value = gameState.difficulty;
        difficultyEl.classList.toggle('hidden', gameState.mode !== '1p');
        const finished = Boolean(gameState.winner) || gameState.drawn;
        popupEl.classList.toggle('hidden', !finished);
        if (finished) {
          popupTitleEl.textContent = popupText(gameState);
        }
      }

      function schedulePoll() {
        clearTimeout(pollTimer);
        if (gameState && gameState.aiPending) {
          pollTimer = setTimeout(refresh, 150);
        }
      }

      async function refresh() {
        try {
          gameState = await request(`/api/game/${gameState.id}`);
          render();
          schedulePoll();
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      async function startGame() {
        try {
          gameState = await request('/api/game', { mode: '1p', difficulty: difficultyEl.value });
          render();
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      async function playMove(index) {
        if (!gameState) {
          return;
        }
        try {
          gameState = await request(`/api/game/${gameState.id}/move`, { index });
          render();
          schedulePoll();
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      async function restart(options = {}) {
        if (!gameState) {
          return;
        }
        try {
          clearTimeout(pollTimer);
          gameState = await request(`/api/game/${gameState.id}/restart`, options);
          render();
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      themeToggle.addEventListener('change', () => {
        const dark = themeToggle.checked;
        appEl.classList.toggle('dark', dark);
        appEl.classList.toggle('light', !dark);
        themeLabel.textContent = dark ? 'Dark' : 'Light';
      });
      modeButtons.forEach((button) => {
        button.addEventListener('click', () => restart({ mode: button.dataset.mode }));
      });
      difficultyEl.addEventListener('change', () => restart({ difficulty: difficultyEl.value }));
      document.getElementById('restart').addEventListener('click', () => restart());
      document.getElementById('play-again').addEventListener('click', () => restart());

      startGame();
    </script>
  </body>
</html>
"""
