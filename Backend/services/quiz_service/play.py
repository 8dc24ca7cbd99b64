# services/quiz_service/play.py
"""
Stored play sessions: one active game per player, kept in Firestore between
requests. When a game ends the score is logged and the game's play counter is
bumped, once.
"""

from __future__ import annotations
from typing import Any, Dict
import logging

from services.record_store import RecordStore
from .session import QuizSession, SessionStateError

logger = logging.getLogger(__name__)


def _load(store: RecordStore, player_name: str):
    data = store.get_session(player_name)
    if not data:
        return None
    return QuizSession.from_dict(data)


def _finish(store: RecordStore, session: QuizSession) -> Dict[str, Any]:
    """
    Write the score and play count for a terminal session, at most once.

    The session is stored as recorded before the statistics are written, so a
    failed save leaves no score behind and a retry cannot write a second one.
    """
    if session.score_recorded:
        return {"ok": True, "skipped": True}
    session.score_recorded = True
    store.save_session(session.player_name, session.to_dict())

    score_result = store.create_score(session.outcome())
    plays_result = store.increment_plays(session.game_id)
    if not score_result.get("ok") or not plays_result.get("ok"):
        logger.warning(
            "[play] Statistics for %s on %s incomplete: score=%s plays=%s",
            session.player_name, session.game_id, score_result, plays_result,
        )
    return {"score": score_result, "plays": plays_result}


def start_game(store: RecordStore, player_name: str, game_id: str, rng=None) -> Dict[str, Any]:
    """
    Start (or restart) a play-through. Any unfinished session is replaced.

    Returns:
        {"ok": true, "status": "playing", "level": 1, "question": "...",
         "answers": [...], "jokerAvailable": true, ...}
    """
    game = store.get_game(game_id)
    if game is None:
        return {"ok": False, "error": f"Spiel {game_id} nicht gefunden"}

    try:
        session = QuizSession.start(game, player_name, rng)
    except SessionStateError as e:
        return {"ok": False, "error": str(e)}

    store.save_session(player_name, session.to_dict())
    logger.info("[play] %s started %s", player_name, game_id)
    return {"ok": True, **session.public_state()}


def answer(store: RecordStore, player_name: str, selected_index: int) -> Dict[str, Any]:
    session = _load(store, player_name)
    if session is None:
        return {"ok": False, "error": "Kein aktives Spiel. Zuerst /start aufrufen."}

    try:
        result = session.answer(selected_index)
    except SessionStateError as e:
        return {"ok": False, "error": str(e)}

    stats = None
    if session.is_finished:
        stats = _finish(store, session)
    else:
        store.save_session(player_name, session.to_dict())

    response = {"ok": True, **result, "state": session.public_state()}
    if stats is not None:
        response["statistics"] = stats
    return response


def next_level(store: RecordStore, player_name: str, rng=None) -> Dict[str, Any]:
    session = _load(store, player_name)
    if session is None:
        return {"ok": False, "error": "Kein aktives Spiel."}

    game = store.get_game(session.game_id)
    if game is None:
        return {"ok": False, "error": "Das Spiel existiert nicht mehr."}

    try:
        session.advance(game, rng)
    except SessionStateError as e:
        return {"ok": False, "error": str(e)}

    store.save_session(player_name, session.to_dict())
    return {"ok": True, **session.public_state()}


def use_joker(store: RecordStore, player_name: str) -> Dict[str, Any]:
    session = _load(store, player_name)
    if session is None:
        return {"ok": False, "error": "Kein aktives Spiel."}

    hint = session.use_joker()
    if hint is None:
        return {"ok": False, "error": "Joker nicht verfügbar", "jokerUsed": session.joker_used}

    store.save_session(player_name, session.to_dict())
    return {"ok": True, "hint": hint}


def get_state(store: RecordStore, player_name: str) -> Dict[str, Any]:
    session = _load(store, player_name)
    if session is None:
        return {"ok": True, "has_active_game": False}
    return {"ok": True, "has_active_game": not session.is_finished, **session.public_state()}
