# services/quiz_service/session.py
"""
One play-through of a game: six levels, one random question per level,
a single hint joker, and a money ladder.

    playing --correct--> level_cleared --advance--> playing (next level)
    playing --correct on level 6--> won
    playing --wrong--> lost

``won`` and ``lost`` are terminal. The session is plain data so it can be
stored between HTTP requests (``to_dict`` / ``from_dict``).
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import random

from services.stats.models import (
    ANSWERS_PER_QUESTION, LEVEL_COUNT, MONEY_LADDER, QUESTIONS_PER_LEVEL, Game, PlayerScore,
    Question,
)

PLAYING = "playing"
LEVEL_CLEARED = "level_cleared"
WON = "won"
LOST = "lost"

TERMINAL_STATES = (WON, LOST)


class SessionStateError(Exception):
    """Raised when an action is not allowed in the session's current state."""


def _playable(q: Question) -> bool:
    return len(q.a) == ANSWERS_PER_QUESTION and 0 <= q.correct < len(q.a)


def level_questions(game: Game, level: int) -> List[Question]:
    """
    Candidate questions for a zero-based level.

    Games whose questions carry no level at all are split positionally into
    consecutive groups of three. Questions without four answers and a valid
    correct index are skipped.
    """
    if any(q.level is not None for q in game.questions):
        pool = [q for q in game.questions if q.level == level + 1]
    else:
        start = level * QUESTIONS_PER_LEVEL
        pool = game.questions[start:start + QUESTIONS_PER_LEVEL]
    return [q for q in pool if _playable(q)]


class QuizSession:
    def __init__(self, player_name: str, game_id: str, game_title: str):
        self.player_name = player_name
        self.game_id = game_id
        self.game_title = game_title
        self.status = PLAYING
        self.level = 0
        self.earned_money = 0
        self.joker_used = False
        self.hint_visible = False
        self.score_recorded = False
        self.question: Dict[str, Any] = {}
        self.correct_index = -1

    # ------------------------------------------------------------------
    # Construction / persistence
    # ------------------------------------------------------------------

    @classmethod
    def start(cls, game: Game, player_name: str, rng=None) -> "QuizSession":
        session = cls(player_name, game.id, game.title)
        session._present_question(game, rng or random)
        return session

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizSession":
        session = cls(data["playerName"], data["gameId"], data.get("gameTitle", ""))
        session.status = data.get("status", PLAYING)
        session.level = int(data.get("level", 0))
        session.earned_money = int(data.get("earnedMoney", 0))
        session.joker_used = bool(data.get("jokerUsed", False))
        session.hint_visible = bool(data.get("hintVisible", False))
        session.score_recorded = bool(data.get("scoreRecorded", False))
        session.question = dict(data.get("question") or {})
        session.correct_index = int(data.get("correctIndex", -1))
        return session

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerName": self.player_name,
            "gameId": self.game_id,
            "gameTitle": self.game_title,
            "status": self.status,
            "level": self.level,
            "earnedMoney": self.earned_money,
            "jokerUsed": self.joker_used,
            "hintVisible": self.hint_visible,
            "scoreRecorded": self.score_recorded,
            "question": dict(self.question),
            "correctIndex": self.correct_index,
        }

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    @property
    def is_finished(self) -> bool:
        return self.status in TERMINAL_STATES

    def _present_question(self, game: Game, rng) -> None:
        pool = level_questions(game, self.level)
        if not pool:
            raise SessionStateError(f"Game {game.id} has no questions for level {self.level + 1}")

        picked = rng.choice(pool)
        order = list(range(len(picked.a)))
        rng.shuffle(order)

        self.question = {
            "q": picked.q,
            "answers": [picked.a[i] for i in order],
            "hint": picked.hint,
        }
        self.correct_index = order.index(picked.correct)
        self.hint_visible = False

    def answer(self, index: int) -> Dict[str, Any]:
        if self.status != PLAYING:
            raise SessionStateError(f"Cannot answer while {self.status}")

        is_correct = index == self.correct_index
        if is_correct:
            self.earned_money = MONEY_LADDER[self.level]
            self.status = WON if self.level == LEVEL_COUNT - 1 else LEVEL_CLEARED
        else:
            self.status = LOST

        return {
            "isCorrect": is_correct,
            "selectedIndex": index,
            "correctIndex": self.correct_index,
            "status": self.status,
            "earnedMoney": self.earned_money,
        }

    def advance(self, game: Game, rng=None) -> None:
        if self.status != LEVEL_CLEARED:
            raise SessionStateError(f"Cannot advance while {self.status}")
        self.level += 1
        self.status = PLAYING
        self._present_question(game, rng or random)

    def use_joker(self) -> Optional[str]:
        """Reveal the current hint. Returns None if the joker is spent or there is no hint."""
        if self.status != PLAYING or self.joker_used or not self.question.get("hint"):
            return None
        self.joker_used = True
        self.hint_visible = True
        return self.question["hint"]

    def outcome(self) -> PlayerScore:
        if not self.is_finished:
            raise SessionStateError("Session is still running")
        return PlayerScore(
            id=None,
            player_name=self.player_name,
            game_id=self.game_id,
            game_title=self.game_title,
            level=self.level + 1,
            earned_money=self.earned_money,
            completed=self.status == WON,
        )

    def public_state(self) -> Dict[str, Any]:
        """State for the client; the correct index is only revealed once the game is over."""
        state = {
            "gameId": self.game_id,
            "gameTitle": self.game_title,
            "status": self.status,
            "level": self.level + 1,
            "levelMoney": MONEY_LADDER[self.level],
            "moneyLadder": list(MONEY_LADDER),
            "earnedMoney": self.earned_money,
            "question": self.question.get("q"),
            "answers": list(self.question.get("answers") or []),
            "jokerAvailable": not self.joker_used and bool(self.question.get("hint")),
            "hint": self.question.get("hint") if self.hint_visible else None,
        }
        if self.is_finished:
            state["correctIndex"] = self.correct_index
        return state
