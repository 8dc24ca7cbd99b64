# services/stats/filters.py
"""Dashboard filter state and the game/score predicates built from it."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from .models import ALL, Game, PlayerScore

MIN_TOP_LIMIT = 1
MAX_TOP_LIMIT = 100
DEFAULT_TOP_LIMIT = 10


def clamp_top_limit(value: int) -> int:
    return max(MIN_TOP_LIMIT, min(MAX_TOP_LIMIT, value))


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class FilterModel:
    topic: str = ALL
    difficulty: str = ALL
    creator: str = ALL
    search: str = ""
    min_plays: int = 0
    only_completed: bool = False
    top_limit: int = DEFAULT_TOP_LIMIT

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "topic", self.topic or ALL)
        object.__setattr__(self, "difficulty", self.difficulty or ALL)
        object.__setattr__(self, "creator", self.creator or ALL)
        object.__setattr__(self, "search", self.search or "")
        object.__setattr__(self, "min_plays", max(0, int(self.min_plays)))
        object.__setattr__(self, "top_limit", clamp_top_limit(int(self.top_limit)))

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "FilterModel":
        """Build from query-string style input; bad numbers fall back to defaults."""
        return cls(
            topic=args.get("topic") or ALL,
            difficulty=args.get("difficulty") or ALL,
            creator=args.get("creator") or ALL,
            search=args.get("search") or "",
            min_plays=_parse_int(args.get("minPlays"), 0),
            only_completed=_parse_bool(args.get("onlyCompleted")),
            top_limit=_parse_int(args.get("topLimit"), DEFAULT_TOP_LIMIT),
        )

    @property
    def needle(self) -> str:
        return self.search.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "difficulty": self.difficulty,
            "creator": self.creator,
            "search": self.search,
            "minPlays": self.min_plays,
            "onlyCompleted": self.only_completed,
            "topLimit": self.top_limit,
        }


# ============================================================================
# Predicates
# ============================================================================

def _game_facets_match(game: Game, f: FilterModel) -> bool:
    """Topic / difficulty / creator / minPlays checks shared by both predicates."""
    if f.topic != ALL and game.topic != f.topic:
        return False
    if f.difficulty != ALL and game.difficulty != f.difficulty:
        return False
    if f.creator != ALL and game.creator != f.creator:
        return False
    return game.plays >= f.min_plays


def _contains(needle: str, *fields: str) -> bool:
    return any(needle in (value or "").lower() for value in fields)


def game_matches(game: Game, f: FilterModel) -> bool:
    if f.needle and not _contains(f.needle, game.title, game.topic, game.creator):
        return False
    return _game_facets_match(game, f)


def score_matches(score: PlayerScore, games_by_id: Mapping[str, Game], f: FilterModel) -> bool:
    """A score whose game is not in ``games_by_id`` never matches."""
    game = games_by_id.get(score.game_id)
    if game is None:
        return False
    if f.only_completed and not score.completed:
        return False
    if not _game_facets_match(game, f):
        return False
    if f.needle and not _contains(f.needle, score.player_name, score.game_title, game.topic, game.creator):
        return False
    return True


def filter_games(games: Iterable[Game], f: FilterModel) -> List[Game]:
    return [g for g in games if game_matches(g, f)]


def filter_scores(
    scores: Iterable[PlayerScore], games_by_id: Mapping[str, Game], f: FilterModel
) -> List[PlayerScore]:
    return [s for s in scores if score_matches(s, games_by_id, f)]


def index_games(games: Iterable[Game]) -> Dict[str, Game]:
    return {g.id: g for g in games if g.id}
