# routes/dashboard.py
"""
Dashboard API: global and personal statistics under the active filters.
"""
from flask import Blueprint, current_app, request, jsonify
from player_middleware import require_player

from services.stats.dashboard import get_dashboard
from services.stats.filters import FilterModel

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/dashboard")
@require_player
def dashboard():
    """
    GET /api/dashboard?topic=Alle&difficulty=Alle&creator=Alle&search=&minPlays=0&onlyCompleted=false&topLimit=10

    All filter arguments are optional. Counters ignore the filters; the
    leaderboard, history, popular games, top players and topic breakdown
    use them.
    """
    f = FilterModel.from_args(request.args)
    store = current_app.extensions["record_store"]
    return jsonify(get_dashboard(store, request.player, f)), 200
