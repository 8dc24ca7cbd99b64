# app.py
"""
Main Flask application entrypoint.

- Loads env/config
- Builds the Firestore record store and the OpenAI question supplier once
- Enables CORS for /api/*
- Registers blueprints: Questions, Games, Dashboard, Play
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from flask import Flask, jsonify
from flask_cors import CORS

# ---- Config & blueprints (config loads .env) ----
from config import Config
from routes.questions import questions_bp
from routes.games import games_bp
from routes.dashboard import dashboard_bp
from services.errors import InputValidationError, QuizError
from services.quiz_service.routes import play_bp


def configure_logging(level: str = None):
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

# ---------------------------------------------------------------------
# App Factory
# ---------------------------------------------------------------------
def create_app(store=None, supplier=None) -> Flask:
    """
    ``store`` and ``supplier`` default to the Firestore-backed RecordStore and
    the OpenAI QuestionSupplier; tests pass their own.
    """
    app = Flask(__name__)
    app.config.from_object(Config)

    if store is None:
        from services.firebase import get_db
        from services.record_store import RecordStore
        store = RecordStore(get_db())
    if supplier is None:
        from services.question_supplier import QuestionSupplier
        supplier = QuestionSupplier()
    app.extensions["record_store"] = store
    app.extensions["question_supplier"] = supplier

    CORS(app, resources={r"/api/*": {"origins": Config.CORS_ORIGINS}})

    # --- Register blueprints ---
    app.register_blueprint(questions_bp, url_prefix="/api")
    app.register_blueprint(games_bp, url_prefix="/api")
    app.register_blueprint(dashboard_bp, url_prefix="/api")
    app.register_blueprint(play_bp, url_prefix="/api")

    # --- Health (public) ---
    @app.get("/api/health")
    def health():
        return jsonify({
            "ok": True,
            "service": "flask",
            "version": "1.0.0",
            "server_time": datetime.now(timezone.utc).isoformat(),
        })

    # --- JSON error handlers ---
    @app.errorhandler(QuizError)
    def handle_quiz_error(err):
        app.logger.error(f"[app] {err}")
        status = 400 if isinstance(err, InputValidationError) else 500
        return jsonify({"error": err.user_message}), status

    @app.errorhandler(400)
    def handle_400(err):
        return jsonify({"error": str(err)}), 400

    @app.errorhandler(404)
    def handle_404(err):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(500)
    def handle_500(err):
        return jsonify({"error": "Internal server error"}), 500

    return app


# ---------------------------------------------------------------------
# Dev Server Launcher
# ---------------------------------------------------------------------
if __name__ == "__main__":
    configure_logging()
    app = create_app()
    app.run(host="0.0.0.0", port=Config.PORT, debug=True)
