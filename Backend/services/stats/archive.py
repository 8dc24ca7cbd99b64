# services/stats/archive.py
"""Game archive: search, filter and sort the stored games for browsing."""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List

from .filters import FilterModel, filter_games
from .models import Game

SORT_KEYS = ("date", "rating", "plays")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created(game: Game) -> datetime:
    ts = game.created_at
    if ts is None:
        return _EPOCH
    # Firestore timestamps are aware; treat naive ones as UTC
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def list_archive(games: List[Game], topic: str = None, difficulty: str = None,
                 search: str = None, sort_by: str = "date") -> Dict[str, Any]:
    """
    Returns:
        {
            "ok": true,
            "sort": "plays",
            "games": [{"id": "...", "title": "...", "plays": 12, "rating": 4.5, ...}],
            "count": 1
        }
    """
    if sort_by not in SORT_KEYS:
        return {"ok": False, "error": f"sort must be one of {', '.join(SORT_KEYS)}"}

    f = FilterModel(topic=topic, difficulty=difficulty, search=search)
    matching = filter_games(games, f)

    if sort_by == "rating":
        matching.sort(key=lambda g: g.rating, reverse=True)
    elif sort_by == "plays":
        matching.sort(key=lambda g: g.plays, reverse=True)
    else:
        matching.sort(key=_created, reverse=True)

    return {
        "ok": True,
        "sort": sort_by,
        "games": [g.summary() for g in matching],
        "count": len(matching),
    }
