# services/quiz_service/routes.py
from flask import Blueprint, current_app, request, jsonify
from player_middleware import require_player

from . import play
from .names import random_player_name

play_bp = Blueprint("play_bp", __name__)


def _store():
    return current_app.extensions["record_store"]

# -------------------- Play --------------------

@play_bp.post("/play/start")
@require_player
def play_start():
    """
    Start a play-through of a stored game.

    Request body:
    {
        "gameId": "abc123"
    }
    """
    data = request.get_json(silent=True) or {}
    game_id = data.get("gameId")
    if not game_id:
        return jsonify({"ok": False, "error": "gameId required"}), 400

    result = play.start_game(_store(), request.player, game_id)
    return jsonify(result), 200 if result.get("ok") else 404

@play_bp.post("/play/answer")
@require_player
def play_answer():
    """
    Answer the current question.

    Request body:
    {
        "index": 2
    }

    Response:
    {
        "ok": true,
        "isCorrect": true,
        "correctIndex": 2,
        "status": "level_cleared",
        "earnedMoney": 1000,
        "state": {...}
    }
    """
    data = request.get_json(silent=True) or {}
    index = data.get("index")
    if isinstance(index, bool) or not isinstance(index, int):
        return jsonify({"ok": False, "error": "index must be an integer"}), 400

    result = play.answer(_store(), request.player, index)
    return jsonify(result), 200 if result.get("ok") else 409

@play_bp.post("/play/next")
@require_player
def play_next():
    """Move on to the next level after a correct answer."""
    result = play.next_level(_store(), request.player)
    return jsonify(result), 200 if result.get("ok") else 409

@play_bp.post("/play/joker")
@require_player
def play_joker():
    """Reveal the hint of the current question (once per game)."""
    result = play.use_joker(_store(), request.player)
    return jsonify(result), 200 if result.get("ok") else 409

@play_bp.get("/play/state")
@require_player
def play_state():
    return jsonify(play.get_state(_store(), request.player)), 200

# -------------------- Players --------------------

@play_bp.get("/players/random-name")
def players_random_name():
    """Suggest a player name for first-time visitors (public endpoint)."""
    return jsonify({"ok": True, "playerName": random_player_name()}), 200
