# services/question_supplier.py
"""
Turns a source text into the 18 questions of a millionaire game via OpenAI.

The response must contain exactly 18 well-formed questions, three for each
level 1-6. Anything else rejects the whole batch; partial games are never
created.
"""

from __future__ import annotations
from typing import Any, Dict, List
import json
import logging

from openai import OpenAI

from config import Config
from services.errors import InputValidationError, SupplierFormatError
from services.stats.models import (
    ANSWERS_PER_QUESTION, DIFFICULTIES, LEVEL_COUNT, MONEY_LADDER,
    QUESTIONS_PER_GAME, QUESTIONS_PER_LEVEL, Question,
)

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50

LEVEL_DESCRIPTIONS = [
    "sehr einfache Fragen zu Sprachlogik und Allgemeinwissen",
    "einfache Fragen zum Grundwissen des Themas",
    "mittlere Fragen zu Details",
    "anspruchsvolle Fragen zu spezifischem Wissen",
    "schwere Fragen auf Expertenniveau",
    "sehr schwere Fragen zu detailliertem Expertenwissen",
]

PROMPT_TEMPLATE = """Du bist ein Quiz-Generator für ein Millionenspiel. Erstelle GENAU {total} Multiple-Choice-Fragen zum folgenden Text.

Die Fragen sind in {levels} Level aufgeteilt, GENAU {per_level} Fragen pro Level:
{ladder}

Thema: {topic}
Schwierigkeit: {difficulty}

Text:
{text}

Antworte NUR mit einem JSON-Array ohne Markdown und ohne Erklärungen. Jedes Element hat diese Struktur:
{{"level": 1-6, "q": "Frage?", "a": ["Antwort A", "Antwort B", "Antwort C", "Antwort D"], "correct": 0-3, "hint": "Hilfreicher Hinweis"}}
"""


def format_chf(amount: int) -> str:
    """Swiss thousands separator: 1000000 -> 1'000'000."""
    return f"{amount:,}".replace(",", "'")


def build_prompt(text: str, topic: str, difficulty: str) -> str:
    ladder = "\n".join(
        f"- Level {i + 1} ({format_chf(MONEY_LADDER[i])} CHF): {QUESTIONS_PER_LEVEL} {desc}"
        for i, desc in enumerate(LEVEL_DESCRIPTIONS)
    )
    return PROMPT_TEMPLATE.format(
        total=QUESTIONS_PER_GAME,
        levels=LEVEL_COUNT,
        per_level=QUESTIONS_PER_LEVEL,
        ladder=ladder,
        topic=topic,
        difficulty=difficulty,
        text=text,
    )


def validate_request(text: Any, topic: Any, difficulty: Any) -> None:
    """Raise InputValidationError before any LLM call is made."""
    if not isinstance(text, str) or len(text.strip()) < MIN_TEXT_LENGTH:
        raise InputValidationError(f"Text muss mindestens {MIN_TEXT_LENGTH} Zeichen lang sein")
    if not isinstance(topic, str) or not topic.strip():
        raise InputValidationError("Bitte ein Thema angeben")
    if difficulty not in DIFFICULTIES:
        raise InputValidationError(f"Schwierigkeit muss eine von {', '.join(DIFFICULTIES)} sein")


def strip_code_fences(raw: str) -> str:
    lines = [ln for ln in raw.strip().splitlines() if not ln.strip().startswith("```")]
    return "\n".join(lines).strip()


def _check_question(item: Any, position: int) -> Question:
    if not isinstance(item, dict):
        raise SupplierFormatError(f"Frage {position} ist kein Objekt")

    level = item.get("level")
    if isinstance(level, bool) or not isinstance(level, int) or not 1 <= level <= LEVEL_COUNT:
        raise SupplierFormatError(f"Frage {position} hat ein ungültiges Level: {level!r}")

    text = item.get("q")
    if not isinstance(text, str) or not text.strip():
        raise SupplierFormatError(f"Frage {position} hat keinen Fragetext")

    answers = item.get("a")
    if (not isinstance(answers, list) or len(answers) != ANSWERS_PER_QUESTION
            or not all(isinstance(x, str) and x.strip() for x in answers)):
        raise SupplierFormatError(f"Frage {position} braucht genau {ANSWERS_PER_QUESTION} Antworten")

    correct = item.get("correct")
    if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < len(answers):
        raise SupplierFormatError(f"Frage {position} hat einen ungültigen Lösungsindex: {correct!r}")

    hint = item.get("hint")
    return Question(
        q=text.strip(),
        a=[x.strip() for x in answers],
        correct=correct,
        level=level,
        hint=hint.strip() if isinstance(hint, str) and hint.strip() else None,
    )


def validate_questions(payload: Any) -> List[Question]:
    """Strict check: 18 questions, 3 per level, 4 answers each, correct index in range."""
    if not isinstance(payload, list):
        raise SupplierFormatError("Antwort ist kein JSON-Array")
    if len(payload) != QUESTIONS_PER_GAME:
        raise SupplierFormatError(f"Erwartete {QUESTIONS_PER_GAME} Fragen, erhielt {len(payload)}")

    questions = [_check_question(item, i + 1) for i, item in enumerate(payload)]

    for level in range(1, LEVEL_COUNT + 1):
        count = sum(1 for q in questions if q.level == level)
        if count != QUESTIONS_PER_LEVEL:
            raise SupplierFormatError(f"Level {level} hat {count} Fragen statt {QUESTIONS_PER_LEVEL}")
    return questions


def parse_response(raw: str) -> List[Question]:
    try:
        payload = json.loads(strip_code_fences(raw or ""))
    except json.JSONDecodeError as e:
        raise SupplierFormatError(f"Antwort ist kein gültiges JSON ({e.msg})") from e
    return validate_questions(payload)


class QuestionSupplier:
    """Wraps the OpenAI chat API. The client is created on first use."""

    def __init__(self, client=None, api_key: str = None, model: str = None,
                 temperature: float = None, max_tokens: int = None):
        self._client = client
        self.api_key = api_key or Config.OPENAI_API_KEY
        self.model = model or Config.OPENAI_MODEL
        self.temperature = Config.OPENAI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or Config.OPENAI_MAX_TOKENS

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise SupplierFormatError("KI-Dienst ist nicht konfiguriert (OPENAI_API_KEY fehlt)")
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate(self, text: str, topic: str, difficulty: str) -> List[Question]:
        validate_request(text, topic, difficulty)
        prompt = build_prompt(text.strip(), topic.strip(), difficulty)

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except SupplierFormatError:
            raise
        except Exception as e:
            logger.error("[questions] OpenAI request failed: %s", e)
            raise SupplierFormatError(f"KI-Anfrage fehlgeschlagen: {e}") from e

        raw = completion.choices[0].message.content or ""
        questions = parse_response(raw)
        logger.info("[questions] Generated %d questions for topic %r", len(questions), topic)
        return questions
