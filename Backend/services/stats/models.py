# services/stats/models.py
"""
Record shapes for games and player scores.

Firestore documents are loosely typed (fields may be missing or stored with
the wrong numeric type), so every document goes through ``from_doc`` exactly
once when it is read. Consumers can then rely on the defaults below instead
of re-applying them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

# ============================================================================
# Constants
# ============================================================================

ALL = "Alle"
DEFAULT_TOPIC = "Ohne Thema"
DEFAULT_CREATOR = "Unbekannt"

DIFFICULTIES = ["Einfach", "Mittel", "Schwer"]

MONEY_LADDER = [10, 100, 1_000, 10_000, 100_000, 1_000_000]
LEVEL_COUNT = len(MONEY_LADDER)
QUESTIONS_PER_LEVEL = 3
QUESTIONS_PER_GAME = LEVEL_COUNT * QUESTIONS_PER_LEVEL
ANSWERS_PER_QUESTION = 4


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if isinstance(ts, datetime) else None


# ============================================================================
# Records
# ============================================================================

@dataclass
class Question:
    """One multiple-choice item embedded in a game."""

    q: str
    a: List[str]
    correct: int
    level: Optional[int] = None
    hint: Optional[str] = None

    @classmethod
    def from_doc(cls, data: Dict[str, Any]) -> "Question":
        level = data.get("level")
        hint = data.get("hint")
        return cls(
            q=str(data.get("q") or ""),
            a=[str(x) for x in (data.get("a") or [])],
            correct=_as_int(data.get("correct"), -1),
            level=_as_int(level) if level is not None else None,
            hint=str(hint) if hint else None,
        )

    def to_doc(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"q": self.q, "a": list(self.a), "correct": self.correct}
        if self.level is not None:
            doc["level"] = self.level
        if self.hint:
            doc["hint"] = self.hint
        return doc


@dataclass
class Game:
    """A stored question set with its play and rating statistics."""

    id: Optional[str]
    title: str
    topic: str = DEFAULT_TOPIC
    difficulty: str = ""
    creator: str = DEFAULT_CREATOR
    questions: List[Question] = field(default_factory=list)
    plays: int = 0
    ratings: List[int] = field(default_factory=list)
    rating: float = 0.0
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc_id: Optional[str], data: Dict[str, Any]) -> "Game":
        created = data.get("createdAt")
        return cls(
            id=doc_id,
            title=str(data.get("title") or ""),
            topic=_as_text(data.get("topic"), DEFAULT_TOPIC),
            difficulty=str(data.get("difficulty") or ""),
            creator=_as_text(data.get("creator"), DEFAULT_CREATOR),
            questions=[Question.from_doc(q) for q in (data.get("questions") or []) if isinstance(q, dict)],
            plays=max(0, _as_int(data.get("plays"))),
            ratings=[_as_int(r) for r in (data.get("ratings") or [])],
            rating=_as_float(data.get("rating")),
            created_at=created if isinstance(created, datetime) else None,
        )

    def to_doc(self) -> Dict[str, Any]:
        """Payload for a new game document (createdAt is set by the store)."""
        return {
            "title": self.title,
            "topic": self.topic,
            "difficulty": self.difficulty,
            "creator": self.creator,
            "questions": [q.to_doc() for q in self.questions],
            "plays": self.plays,
            "ratings": list(self.ratings),
            "rating": self.rating,
        }

    def summary(self) -> Dict[str, Any]:
        """Game metadata without the questions, for listings."""
        return {
            "id": self.id,
            "title": self.title,
            "topic": self.topic,
            "difficulty": self.difficulty,
            "creator": self.creator,
            "plays": self.plays,
            "rating": round(self.rating, 1),
            "ratingCount": len(self.ratings),
            "createdAt": iso(self.created_at),
        }


@dataclass
class PlayerScore:
    """Outcome of one finished play attempt. Never updated after creation."""

    id: Optional[str]
    player_name: str
    game_id: str
    game_title: str = ""
    level: int = 1
    earned_money: int = 0
    completed: bool = False
    timestamp: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc_id: Optional[str], data: Dict[str, Any]) -> "PlayerScore":
        ts = data.get("timestamp")
        return cls(
            id=doc_id,
            player_name=str(data.get("playerName") or ""),
            game_id=str(data.get("gameId") or ""),
            game_title=str(data.get("gameTitle") or ""),
            level=_as_int(data.get("level"), 1),
            earned_money=_as_int(data.get("earnedMoney")),
            completed=bool(data.get("completed", False)),
            timestamp=ts if isinstance(ts, datetime) else None,
        )

    def to_doc(self) -> Dict[str, Any]:
        return {
            "playerName": self.player_name,
            "gameId": self.game_id,
            "gameTitle": self.game_title,
            "level": self.level,
            "earnedMoney": self.earned_money,
            "completed": self.completed,
        }

    def to_json(self) -> Dict[str, Any]:
        data = self.to_doc()
        data["id"] = self.id
        data["timestamp"] = iso(self.timestamp)
        return data
