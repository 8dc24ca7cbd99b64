# player_middleware.py
from functools import wraps
from flask import request, jsonify

MAX_NAME_LENGTH = 40


def current_player_name():
    """Self-declared player name from 'X-Player-Name' or the JSON body's 'playerName'."""
    name = request.headers.get("X-Player-Name", "")
    if not name:
        data = request.get_json(silent=True) or {}
        name = data.get("playerName") or ""
    return str(name).strip()[:MAX_NAME_LENGTH]


def require_player(fn):
    """
    Require a player name on the request. There is no account behind it,
    the name is only used to attribute scores and created games.
    Sets request.player = "<name>".
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        name = current_player_name()
        if not name:
            return jsonify({"error": "Missing player name (X-Player-Name header)"}), 401
        request.player = name
        return fn(*args, **kwargs)
    return wrapper
