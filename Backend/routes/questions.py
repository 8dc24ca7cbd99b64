# routes/questions.py
"""
Question generation API: text in, 18 validated millionaire questions out.
"""
from flask import Blueprint, current_app, request, jsonify

from services.errors import InputValidationError, SupplierFormatError

questions_bp = Blueprint("questions", __name__)


@questions_bp.post("/generate-questions")
def generate_questions():
    """
    POST /api/generate-questions

    Request body:
    {
        "text": "...at least 50 characters...",
        "topic": "Biologie - Genetik",
        "difficulty": "Mittel"
    }

    Response 200:
    {
        "questions": [{"level": 1, "q": "...", "a": [...], "correct": 2, "hint": "..."}, ...]
    }
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    topic = data.get("topic")
    difficulty = data.get("difficulty")
    if not (text and topic and difficulty):
        return jsonify({"error": "text, difficulty and topic required"}), 400

    supplier = current_app.extensions["question_supplier"]
    try:
        questions = supplier.generate(text, topic, difficulty)
    except InputValidationError as e:
        return jsonify({"error": e.user_message}), 400
    except SupplierFormatError as e:
        current_app.logger.error(f"[generate-questions] {e}")
        return jsonify({"error": e.user_message}), 500

    return jsonify({"questions": [q.to_doc() for q in questions]}), 200
