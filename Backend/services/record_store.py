# services/record_store.py
"""
Firestore access for games, player scores and running play sessions.

One RecordStore is built at startup around a Firestore client and passed to
whoever needs it. Reads never raise: a failed read is logged and returns an
empty result. Statistic writes (play counter, rating, score log) are
best-effort and report ``{"ok": bool, ...}`` instead of raising, so the caller
can ignore them. Only game creation raises, because the player must learn
that their game was not saved.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from firebase_admin import firestore

from config import Config
from services.errors import InputValidationError, StoreError
from services.stats.models import Game, PlayerScore

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class RecordStore:
    def __init__(self, db, games_collection: str = None, scores_collection: str = None,
                 sessions_collection: str = None, games_limit: int = None):
        self.db = db
        self.games_collection = games_collection or Config.GAMES_COLLECTION
        self.scores_collection = scores_collection or Config.SCORES_COLLECTION
        self.sessions_collection = sessions_collection or Config.SESSIONS_COLLECTION
        self.games_limit = games_limit or Config.GAMES_FETCH_LIMIT

    # ========================================================================
    # Firestore Helpers
    # ========================================================================

    def _games(self):
        return self.db.collection(self.games_collection)

    def _scores(self):
        return self.db.collection(self.scores_collection)

    def _session_ref(self, player_name: str):
        return self.db.collection(self.sessions_collection).document(player_name)

    # ========================================================================
    # Games
    # ========================================================================

    def create_game(self, game: Game) -> str:
        data = game.to_doc()
        data.update({
            "plays": 0,
            "ratings": [],
            "rating": 0,
            "createdAt": firestore.SERVER_TIMESTAMP,
        })
        try:
            _, doc_ref = self._games().add(data)
        except Exception as e:
            logger.error("[store] Failed to save game %r: %s", game.title, e)
            raise StoreError("create_game", str(e)) from e
        logger.info("[store] Game saved with id %s", doc_ref.id)
        return doc_ref.id

    def get_game(self, game_id: str) -> Optional[Game]:
        if not game_id:
            return None
        try:
            snap = self._games().document(game_id).get()
        except Exception as e:
            logger.warning("[store] Failed to load game %s: %s", game_id, e)
            return None
        if not snap.exists:
            return None
        return Game.from_doc(snap.id, snap.to_dict() or {})

    def list_games(self, limit: int = None) -> List[Game]:
        """Newest games first, at most ``limit`` (capped at 100)."""
        limit = min(limit or self.games_limit, 100)
        q = (self._games()
                .order_by("createdAt", direction=firestore.Query.DESCENDING)
                .limit(limit))
        try:
            games = [Game.from_doc(d.id, d.to_dict() or {}) for d in q.stream()]
        except Exception as e:
            logger.warning("[store] Failed to load games: %s", e)
            return []
        logger.debug("[store] Loaded %d games", len(games))
        return games

    def increment_plays(self, game_id: str) -> Dict[str, Any]:
        if not game_id:
            return {"ok": True, "skipped": True}
        try:
            self._games().document(game_id).update({"plays": firestore.Increment(1)})
        except Exception as e:
            logger.warning("[store] Failed to update plays for %s: %s", game_id, e)
            return {"ok": False, "error": str(e)}
        return {"ok": True}

    def append_rating(self, game_id: str, rating: int) -> Dict[str, Any]:
        """
        Append a 1-5 rating and refresh the cached average.

        The list append and the average are written in one transaction, so
        concurrent raters cannot overwrite each other's average.

        Returns:
            {"ok": true, "rating": 4.0, "ratingCount": 3}
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise InputValidationError(f"Bewertung muss zwischen {MIN_RATING} und {MAX_RATING} liegen")
        if not game_id:
            return {"ok": True, "skipped": True}

        game_ref = self._games().document(game_id)

        @firestore.transactional
        def update_rating(transaction):
            snap = game_ref.get(transaction=transaction)
            if not snap.exists:
                return {"ok": False, "error": f"Game {game_id} not found"}

            data = snap.to_dict() or {}
            ratings = [int(r) for r in (data.get("ratings") or [])]
            ratings.append(rating)
            avg = sum(ratings) / len(ratings)

            transaction.update(game_ref, {"ratings": ratings, "rating": avg})
            return {"ok": True, "rating": round(avg, 1), "ratingCount": len(ratings)}

        try:
            result = update_rating(self.db.transaction())
        except Exception as e:
            logger.warning("[store] Failed to rate game %s: %s", game_id, e)
            return {"ok": False, "error": str(e)}
        if not result.get("ok"):
            logger.warning("[store] %s", result.get("error"))
        return result

    # ========================================================================
    # Scores
    # ========================================================================

    def create_score(self, score: PlayerScore) -> Dict[str, Any]:
        data = score.to_doc()
        data["timestamp"] = firestore.SERVER_TIMESTAMP
        try:
            _, doc_ref = self._scores().add(data)
        except Exception as e:
            logger.error("[store] Failed to save score for %s: %s", score.player_name, e)
            return {"ok": False, "error": str(e)}
        return {"ok": True, "id": doc_ref.id}

    def list_scores(self, player_name: str = None) -> List[PlayerScore]:
        """All scores (or one player's), highest earnings first."""
        q = self._scores()
        if player_name:
            q = q.where("playerName", "==", player_name)
        try:
            scores = [PlayerScore.from_doc(d.id, d.to_dict() or {}) for d in q.stream()]
        except Exception as e:
            logger.warning("[store] Failed to load scores: %s", e)
            return []
        return sorted(scores, key=lambda s: s.earned_money, reverse=True)

    # ========================================================================
    # Sessions
    # ========================================================================

    def get_session(self, player_name: str) -> Optional[Dict[str, Any]]:
        try:
            snap = self._session_ref(player_name).get()
        except Exception as e:
            logger.warning("[store] Failed to load session for %s: %s", player_name, e)
            return None
        return (snap.to_dict() or None) if snap.exists else None

    def save_session(self, player_name: str, state: Dict[str, Any]) -> None:
        data = dict(state)
        data["updatedAt"] = firestore.SERVER_TIMESTAMP
        try:
            self._session_ref(player_name).set(data)
        except Exception as e:
            raise StoreError("save_session", str(e)) from e

    def delete_session(self, player_name: str) -> None:
        try:
            self._session_ref(player_name).delete()
        except Exception as e:
            logger.warning("[store] Failed to clear session for %s: %s", player_name, e)
