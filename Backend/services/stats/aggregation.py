# services/stats/aggregation.py
"""
Dashboard statistics: counters, leaderboards, popularity and topic breakdowns.

Everything here is a pure function of already-fetched games and scores, so the
dashboard route can recompute the full result on every filter change without
touching Firestore again.
"""

from __future__ import annotations
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping
import math

from .filters import FilterModel, filter_games, filter_scores, index_games, score_matches
from .models import ALL, DIFFICULTIES, Game, PlayerScore

# ============================================================================
# Config
# ============================================================================
HISTORY_SIZE = 10
POPULAR_SIZE = 5
TOPIC_TOP_PLAYERS = 3
TOP_TOPICS = 5

# ============================================================================
# Helpers
# ============================================================================

def _percent(count: int, total: int) -> int:
    """Integer percentage, halves rounded up; 0 when there is nothing to share."""
    if total <= 0:
        return 0
    return int(math.floor(count * 100 / total + 0.5))


def _one_decimal(value: float) -> float:
    return round(value, 1)

# ============================================================================
# Counters
# ============================================================================

def linked_scores(scores: Iterable[PlayerScore], games_by_id: Mapping[str, Game]) -> List[PlayerScore]:
    """Drop scores whose game is no longer in the game set."""
    return [s for s in scores if s.game_id in games_by_id]


def compute_counters(games: List[Game], scores: List[PlayerScore]) -> Dict[str, Any]:
    """Global counters, independent of the filter state."""
    scores = linked_scores(scores, index_games(games))
    total_games = len(games)
    avg_rating = sum(g.rating for g in games) / total_games if total_games else 0.0
    return {
        "totalGames": total_games,
        "totalPlays": sum(g.plays for g in games),
        "avgRating": _one_decimal(avg_rating),
        "totalPlayers": len({s.player_name for s in scores}),
        "millionWins": sum(1 for s in scores if s.completed),
    }


def compute_personal(my_scores: List[PlayerScore], games_by_id: Mapping[str, Game]) -> Dict[str, Any]:
    """Counters over the current player's own scores, independent of the filter state."""
    my_scores = linked_scores(my_scores, games_by_id)
    return {
        "myTotalPlays": len(my_scores),
        "myWins": sum(1 for s in my_scores if s.completed),
        "myTotalEarnings": sum(s.earned_money for s in my_scores),
    }

# ============================================================================
# Leaderboards
# ============================================================================

def global_leaderboard(
    filtered_scores: List[PlayerScore], top_limit: int, current_player: str
) -> List[Dict[str, Any]]:
    """
    Highest earnings first. Equal earnings keep the order the scores were
    fetched in (``sorted`` is stable).

    Returns:
        [
            {"rank": 1, "playerName": "KlugeEule7", "gameTitle": "Zellbiologie",
             "earnedMoney": 1000000, "completed": true, "isCurrentPlayer": false},
            ...
        ]
    """
    ranked = sorted(filtered_scores, key=lambda s: s.earned_money, reverse=True)
    return [
        {
            "rank": position,
            "playerName": s.player_name,
            "gameTitle": s.game_title,
            "earnedMoney": s.earned_money,
            "completed": s.completed,
            "isCurrentPlayer": s.player_name == current_player,
        }
        for position, s in enumerate(ranked[:top_limit], start=1)
    ]


def personal_history(
    my_scores: List[PlayerScore], games_by_id: Mapping[str, Game], f: FilterModel
) -> List[Dict[str, Any]]:
    # Not re-sorted: the player's scores are shown in the order the store returned them.
    matching = [s for s in my_scores if score_matches(s, games_by_id, f)]
    return [s.to_json() for s in matching[:HISTORY_SIZE]]


def top_players_by_topic(
    filtered_scores: List[PlayerScore], games_by_id: Mapping[str, Game]
) -> List[Dict[str, Any]]:
    """
    Best three players per topic, one entry per player.

    A player's value is the highest ``earnedMoney`` they reached in the topic.
    The running best starts at 0 and is only replaced by strictly greater
    values, so players who never earned anything do not appear, and a topic
    whose scores are all 0 is listed with an empty ``players`` list.

    Returns:
        [
            {"topic": "Biologie", "players": [
                {"playerName": "A", "earnedMoney": 9000},
                {"playerName": "B", "earnedMoney": 5000}
            ]},
            ...
        ]
    """
    scores_by_topic: Dict[str, List[PlayerScore]] = defaultdict(list)
    for s in filtered_scores:
        game = games_by_id.get(s.game_id)
        if game is None:
            continue
        scores_by_topic[game.topic].append(s)

    groups = []
    for topic, scores in scores_by_topic.items():
        best_by_player: Dict[str, int] = {}
        for s in scores:
            if s.earned_money > best_by_player.get(s.player_name, 0):
                best_by_player[s.player_name] = s.earned_money

        players = sorted(best_by_player.items(), key=lambda item: item[1], reverse=True)
        groups.append({
            "topic": topic,
            "players": [
                {"playerName": name, "earnedMoney": money}
                for name, money in players[:TOPIC_TOP_PLAYERS]
            ],
        })

    return sorted(groups, key=lambda g: g["topic"])

# ============================================================================
# Games
# ============================================================================

def popular_games(filtered_games: List[Game]) -> List[Dict[str, Any]]:
    ranked = sorted(filtered_games, key=lambda g: g.plays, reverse=True)
    return [
        {
            "id": g.id,
            "title": g.title,
            "topic": g.topic,
            "creator": g.creator,
            "plays": g.plays,
            "rating": _one_decimal(g.rating),
        }
        for g in ranked[:POPULAR_SIZE]
    ]


def topic_distribution(filtered_games: List[Game]) -> Dict[str, Any]:
    """
    Games per topic. Only the five largest topics are listed, so their shares
    add up to less than 100 when more topics exist.

    Returns:
        {
            "totalTopicGames": 12,
            "counts": {"Biologie": 5, "Physik": 4, ...},
            "topTopics": [{"topic": "Biologie", "count": 5, "share": 42}, ...]
        }
    """
    counts: Dict[str, int] = {}
    for g in filtered_games:
        counts[g.topic] = counts.get(g.topic, 0) + 1

    total = sum(counts.values())
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return {
        "totalTopicGames": total,
        "counts": counts,
        "topTopics": [
            {"topic": topic, "count": count, "share": _percent(count, total)}
            for topic, count in ranked[:TOP_TOPICS]
        ],
    }


def filter_options(games: Iterable[Game]) -> Dict[str, List[str]]:
    """Values offered by the dashboard's select boxes, in first-seen order."""
    topics: List[str] = []
    creators: List[str] = []
    for g in games:
        if g.topic not in topics:
            topics.append(g.topic)
        if g.creator not in creators:
            creators.append(g.creator)
    return {
        "topics": [ALL] + topics,
        "difficulties": [ALL] + DIFFICULTIES,
        "creators": [ALL] + creators,
    }

# ============================================================================
# Public API
# ============================================================================

def build_dashboard(
    games: List[Game],
    scores: List[PlayerScore],
    my_scores: List[PlayerScore],
    f: FilterModel,
    current_player: str,
) -> Dict[str, Any]:
    """Compute every dashboard section for one filter state."""
    games_by_id = index_games(games)
    filtered_games = filter_games(games, f)
    filtered_scores = filter_scores(scores, games_by_id, f)

    return {
        "ok": True,
        "player": current_player,
        "filters": f.to_dict(),
        "options": filter_options(games),
        "counters": compute_counters(games, scores),
        "personal": compute_personal(my_scores, games_by_id),
        "leaderboard": global_leaderboard(filtered_scores, f.top_limit, current_player),
        "history": personal_history(my_scores, games_by_id, f),
        "popularGames": popular_games(filtered_games),
        "topPlayersByTopic": top_players_by_topic(filtered_scores, games_by_id),
        "topics": topic_distribution(filtered_games),
        "filteredGameCount": len(filtered_games),
        "filteredScoreCount": len(filtered_scores),
    }
