"""FastAPI-powered web UI for playing tic-tac-toe against the computer."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .ai import Difficulty, MoveSelector
from .game import COMPUTER, EMPTY, HUMAN, TicTacToeGame


logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game and the computer opponent it was started with."""

    game: TicTacToeGame
    ai: MoveSelector
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Play X against a computer O in the browser")


# Pause between the human's move and the computer's reply, in seconds.
AI_THINK_DELAY: float = 0.5


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    difficulty: Difficulty = Field(
        default=Difficulty.EASY,
        description="Computer strategy: random, win-or-block, or minimax",
    )


class MoveRequest(BaseModel):
    """Request payload for submitting the human's move."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: StrictInt = Field(alias="cellIndex", ge=0, le=8)


def _create_session(difficulty: Difficulty) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(game=TicTacToeGame(), ai=MoveSelector(difficulty=difficulty))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Started game %s on %s", session_id, difficulty.value)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        try:
            # The session may have been reset while we were waiting.
            if SESSIONS.get(game_id) is not session:
                return
            game = session.game
            if game.is_over or game.current_player != COMPUTER:
                return
            cell_index = game.play_computer_move(session.ai)
            session.move_log.append({"player": COMPUTER, "cellIndex": cell_index})
            if game.is_over:
                logger.info("Game %s finished: %s", game_id, game.outcome)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        outcome = game.outcome
        state: Dict[str, object] = {
            "id": game_id,
            "difficulty": session.ai.difficulty.value,
            "cells": [c if c != EMPTY else "" for c in game.board.cells],
            "currentPlayer": game.current_player,
            "phase": game.phase,
            "outcome": {"status": outcome.status, "winner": outcome.winner},
            "winner": outcome.winner,
            "drawn": game.drawn,
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: BackgroundTasks | None = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="Computer is completing its move")

        if not game.play_human_move(cell_index):
            logger.debug("Game %s: rejected move to cell %d", game_id, cell_index)
            raise HTTPException(status_code=400, detail="Move is not allowed on this turn")

        session.move_log.append({"player": HUMAN, "cellIndex": cell_index})

        should_schedule_ai = not game.is_over and game.current_player == COMPUTER
        if should_schedule_ai:
            session.ai_pending = True
        elif game.is_over:
            logger.info("Game %s finished: %s", game_id, game.outcome)

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.difficulty)
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
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.delete("/api/game/{game_id}")
def reset_game(game_id: str) -> Dict[str, object]:
    if SESSIONS.pop(game_id, None) is None:
        raise HTTPException(status_code=404, detail="Game not found")
    logger.info("Reset game %s", game_id)
    return {"id": game_id, "reset": True}


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(460px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1.25rem;
        letter-spacing: 0.06em;
      }
      button {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      button:hover {
        box-shadow: 0 8px 18px rgba(0, 64, 128, 0.12);
      }
      .difficulty-picker {
        display: flex;
        gap: 1rem;
        justify-content: center;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.5rem;
        margin: 1.25rem auto;
        width: min(300px, 100%);
      }
      .cell {
        aspect-ratio: 1;
        border-radius: 12px;
        background: rgba(226, 232, 255, 0.6);
        font-size: 2.4rem;
        font-weight: 700;
        display: flex;
        align-items: center;
        justify-content: center;
        cursor: pointer;
      }
      .cell.x {
        color: #3a66ff;
      }
      .cell.o {
        color: #ff5a7a;
      }
      .board.thinking .cell {
        cursor: wait;
      }
      .message {
        min-height: 1.5rem;
        color: #b3261e;
      }
      .hidden {
        display: none;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic-Tac-Toe</h1>
      <section id=\"difficulty-selection\">
        <p>Choose a difficulty to start. You play X.</p>
        <div class=\"difficulty-picker\">
          <button data-difficulty=\"easy\">Easy</button>
          <button data-difficulty=\"normal\">Normal</button>
          <button data-difficulty=\"hard\">Hard</button>
        </div>
      </section>
      <section id=\"game-container\" class=\"hidden\">
        <div id=\"status\"></div>
        <div id=\"board\" class=\"board\"></div>
        <div id=\"game-over-message\" class=\"hidden\">
          <h2 id=\"winner-message\"></h2>
        </div>
        <div id=\"message\" class=\"message\"></div>
        <button id=\"reset-button\">Reset</button>
      </section>
    </main>
    <script>
      const difficultySelection = document.getElementById('difficulty-selection');
      const gameContainer = document.getElementById('game-container');
      const statusEl = document.getElementById('status');
      const boardEl = document.getElementById('board');
      const gameOverMessage = document.getElementById('game-over-message');
      const winnerMessage = document.getElementById('winner-message');
      const messageEl = document.getElementById('message');
      const resetButton = document.getElementById('reset-button');

      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let isRequestPending = false;

      function stopPolling() {
        if (pollHandle !== null) {
          clearTimeout(pollHandle);
          pollHandle = null;
        }
      }

      function ensurePolling() {
        if (pollHandle !== null) return;
        pollHandle = window.setTimeout(pollState, 250);
      }

      async function pollState() {
        pollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (response.ok) {
            setState(await response.json());
          }
        } catch (error) {
          console.error('Polling failed', error);
        } finally {
          if (gameState?.aiPending) {
            ensurePolling();
          }
        }
      }

      async function startGame(difficulty) {
        messageEl.textContent = '';
        try {
          const response = await fetch('/api/game', {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ difficulty }),
          });
          if (!response.ok) {
            throw new Error('Unable to start game');
          }
          setState(await response.json());
          difficultySelection.classList.add('hidden');
          gameContainer.classList.remove('hidden');
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        }
      }

      async function sendMove(cellIndex) {
        if (!gameState || gameState.phase !== 'awaiting_human' || isRequestPending) {
          return;
        }
        if (gameState.cells[cellIndex] !== '') return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          const response = await fetch(`/api/game/${gameId}/move`, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ cellIndex }),
          });
          if (!response.ok) {
            const payload = await response.json().catch(() => ({}));
            messageEl.textContent = payload?.detail || 'Invalid move';
            return;
          }
          setState(await response.json());
        } catch (error) {
          messageEl.textContent = 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      async function resetGame() {
        stopPolling();
        if (gameId) {
          await fetch(`/api/game/${gameId}`, { method: 'DELETE' }).catch(() => null);
        }
        gameId = null;
        gameState = null;
        boardEl.innerHTML = '';
        gameContainer.classList.add('hidden');
        difficultySelection.classList.remove('hidden');
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        renderBoard();
        updateStatus();
        if (gameState.aiPending) {
          ensurePolling();
        } else {
          stopPolling();
        }
      }

      function renderBoard() {
        boardEl.innerHTML = '';
        boardEl.classList.toggle('thinking', Boolean(gameState?.aiPending));
        (gameState?.cells || []).forEach((value, index) => {
          const cell = document.createElement('div');
          cell.classList.add('cell');
          cell.dataset.index = String(index);
          if (value) {
            cell.textContent = value;
            cell.classList.add(value.toLowerCase());
          }
          cell.addEventListener('click', () => sendMove(index));
          boardEl.appendChild(cell);
        });
      }

      function updateStatus() {
        const outcome = gameState.outcome;
        if (outcome.status === 'in_progress') {
          statusEl.textContent = `${gameState.currentPlayer}'s turn`;
          gameOverMessage.classList.add('hidden');
          return;
        }
        statusEl.textContent = '';
        winnerMessage.textContent = outcome.status === 'draw' ? 'Draw!' : `${outcome.winner} wins!`;
        gameOverMessage.classList.remove('hidden');
      }

      document.querySelectorAll('#difficulty-selection button').forEach((button) => {
        button.addEventListener('click', () => startGame(button.dataset.difficulty));
      });
      resetButton.addEventListener('click', resetGame);
    </script>
  </body>
</html>
"""
