# services/stats/dashboard.py
"""Fetches the dashboard inputs from the store and hands them to the aggregation."""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict
import logging

from .aggregation import build_dashboard
from .filters import FilterModel

logger = logging.getLogger(__name__)


def get_dashboard(store, player_name: str, f: FilterModel) -> Dict[str, Any]:
    # The three reads are independent; run them side by side and wait for all.
    with ThreadPoolExecutor(max_workers=3) as pool:
        all_scores = pool.submit(store.list_scores)
        my_scores = pool.submit(store.list_scores, player_name)
        games = pool.submit(store.list_games)
        scores, mine, all_games = all_scores.result(), my_scores.result(), games.result()

    logger.debug(
        "[dashboard] %s: %d games, %d scores, %d own scores",
        player_name, len(all_games), len(scores), len(mine),
    )
    return build_dashboard(all_games, scores, mine, f, player_name)
