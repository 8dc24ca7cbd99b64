# routes/games.py
"""
Game archive API: create games from text, browse them, rate them.
"""
from flask import Blueprint, current_app, request, jsonify
from player_middleware import require_player

from services.errors import InputValidationError, StoreError, SupplierFormatError
from services.stats.archive import list_archive
from services.stats.models import Game

games_bp = Blueprint("games", __name__)


def _store():
    return current_app.extensions["record_store"]


@games_bp.get("/games")
def archive():
    """
    GET /api/games?topic=Physik&difficulty=Mittel&search=atom&sort=plays

    Browse stored games (newest 100). sort: date (default), rating, plays.
    """
    games = _store().list_games()
    result = list_archive(
        games,
        topic=request.args.get("topic"),
        difficulty=request.args.get("difficulty"),
        search=request.args.get("search"),
        sort_by=request.args.get("sort", "date"),
    )
    return jsonify(result), 200 if result.get("ok") else 400


@games_bp.get("/games/<game_id>")
def game_detail(game_id):
    game = _store().get_game(game_id)
    if game is None:
        return jsonify({"ok": False, "error": "Not found"}), 404
    return jsonify({"ok": True, **game.summary(), "questionCount": len(game.questions)}), 200


@games_bp.post("/games")
@require_player
def create_game():
    """
    POST /api/games

    Generate the questions for a new game and store it under the player's name.

    Request body:
    {
        "title": "Zellbiologie Basics",
        "topic": "Biologie - Zellbiologie",
        "difficulty": "Mittel",
        "text": "...at least 50 characters..."
    }

    Response 201:
    {"ok": true, "id": "abc123"}
    """
    data = request.get_json(silent=True) or {}
    title = (data.get("title") or "").strip()
    topic = (data.get("topic") or "").strip()
    if not title or not topic:
        return jsonify({"ok": False, "error": "Bitte Titel und Thema eingeben"}), 400

    supplier = current_app.extensions["question_supplier"]
    try:
        questions = supplier.generate(data.get("text"), topic, data.get("difficulty"))
        game = Game(
            id=None,
            title=title,
            topic=topic,
            difficulty=data.get("difficulty"),
            creator=request.player,
            questions=questions,
        )
        game_id = _store().create_game(game)
    except InputValidationError as e:
        return jsonify({"ok": False, "error": e.user_message}), 400
    except (SupplierFormatError, StoreError) as e:
        current_app.logger.error(f"[games] Create failed for {request.player}: {e}")
        return jsonify({"ok": False, "error": e.user_message}), 500

    return jsonify({"ok": True, "id": game_id}), 201


@games_bp.post("/games/<game_id>/rating")
@require_player
def rate_game(game_id):
    """
    POST /api/games/<id>/rating

    Request body:
    {"rating": 4}

    Response:
    {"ok": true, "rating": 4.3, "ratingCount": 7}
    """
    data = request.get_json(silent=True) or {}
    try:
        result = _store().append_rating(game_id, data.get("rating"))
    except InputValidationError as e:
        return jsonify({"ok": False, "error": e.user_message}), 400
    return jsonify(result), 200 if result.get("ok") else 404
