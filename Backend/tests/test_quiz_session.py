import random

import pytest
from conftest import make_game

from services.quiz_service.session import (
    LEVEL_CLEARED, LOST, PLAYING, WON, QuizSession, SessionStateError, level_questions,
)
from services.stats.models import MONEY_LADDER, Question


def _play_to(session, game, levels, rng):
    """Answer ``levels`` questions correctly, advancing between them."""
    for _ in range(levels):
        result = session.answer(session.correct_index)
        assert result["isCorrect"]
        if session.status == LEVEL_CLEARED:
            session.advance(game, rng)
    return session


def test_question_belongs_to_current_level_and_shuffle_keeps_correct_answer():
    game = make_game()
    rng = random.Random(7)
    session = QuizSession.start(game, "Me", rng)

    for level in range(6):
        candidates = level_questions(game, level)
        source = next(q for q in candidates if q.q == session.question["q"])
        assert sorted(session.question["answers"]) == sorted(source.a)
        assert session.question["answers"][session.correct_index] == source.a[source.correct]
        session.answer(session.correct_index)
        if session.status == LEVEL_CLEARED:
            session.advance(game, rng)

    assert session.status == WON


def test_win_earns_the_million():
    game = make_game()
    rng = random.Random(1)
    session = _play_to(QuizSession.start(game, "Me", rng), game, 6, rng)

    assert session.status == WON
    assert session.earned_money == 1_000_000
    score = session.outcome()
    assert score.completed is True
    assert score.level == 6
    assert score.earned_money == 1_000_000
    assert score.game_id == game.id


def test_wrong_answer_keeps_money_of_last_cleared_level():
    game = make_game()
    rng = random.Random(2)
    session = _play_to(QuizSession.start(game, "Me", rng), game, 3, rng)
    assert session.level == 3

    wrong = (session.correct_index + 1) % 4
    result = session.answer(wrong)

    assert result["status"] == LOST
    assert result["isCorrect"] is False
    score = session.outcome()
    assert score.level == 4
    assert score.earned_money == MONEY_LADDER[2]
    assert score.completed is False


def test_no_moves_after_game_over():
    game = make_game()
    session = QuizSession.start(game, "Me", random.Random(3))
    session.answer((session.correct_index + 1) % 4)

    with pytest.raises(SessionStateError):
        session.answer(0)
    with pytest.raises(SessionStateError):
        session.advance(game)


def test_outcome_requires_finished_game():
    session = QuizSession.start(make_game(), "Me", random.Random(4))
    with pytest.raises(SessionStateError):
        session.outcome()


def test_joker_reveals_hint_once_per_game():
    game = make_game()
    rng = random.Random(5)
    session = QuizSession.start(game, "Me", rng)

    assert session.public_state()["jokerAvailable"] is True
    hint = session.use_joker()
    assert hint and hint.startswith("Tipp 1.")
    assert session.public_state()["hint"] == hint
    assert session.use_joker() is None

    session.answer(session.correct_index)
    session.advance(game, rng)
    assert session.public_state()["hint"] is None
    assert session.public_state()["jokerAvailable"] is False
    assert session.use_joker() is None


def test_joker_unavailable_without_hint():
    questions = [Question(q=f"F{i}", a=["a", "b", "c", "d"], correct=0, level=i // 3 + 1) for i in range(18)]
    session = QuizSession.start(make_game(questions=questions), "Me", random.Random(6))
    assert session.use_joker() is None
    assert session.joker_used is False


def test_positional_fallback_without_levels():
    questions = [Question(q=f"F{i}", a=["a", "b", "c", "d"], correct=0) for i in range(18)]
    game = make_game(questions=questions)
    assert [q.q for q in level_questions(game, 2)] == ["F6", "F7", "F8"]


def test_missing_level_questions_raise():
    questions = [Question(q="F", a=["a", "b", "c", "d"], correct=0, level=2)]
    with pytest.raises(SessionStateError):
        QuizSession.start(make_game(questions=questions), "Me", random.Random(0))


def test_state_survives_storage():
    game = make_game()
    rng = random.Random(8)
    session = _play_to(QuizSession.start(game, "Me", rng), game, 2, rng)
    session.use_joker()

    restored = QuizSession.from_dict(session.to_dict())
    assert restored.to_dict() == session.to_dict()
    assert restored.status == PLAYING
    assert "correctIndex" not in restored.public_state()


def test_questions_with_out_of_range_correct_index_are_not_playable():
    questions = [Question(q=f"F{i}", a=["a", "b", "c", "d"], correct=7, level=i // 3 + 1) for i in range(18)]
    with pytest.raises(SessionStateError):
        QuizSession.start(make_game(questions=questions), "Me", random.Random(0))


def test_malformed_questions_are_skipped_within_a_level():
    questions = [
        Question(q="kaputt", a=["a", "b", "c", "d"], correct=-1, level=1),
        Question(q="zu wenig", a=["a", "b"], correct=0, level=1),
        Question(q="gut", a=["a", "b", "c", "d"], correct=3, level=1),
    ]
    game = make_game(questions=questions)
    assert [q.q for q in level_questions(game, 0)] == ["gut"]

    session = QuizSession.start(game, "Me", random.Random(9))
    assert session.question["q"] == "gut"
    assert session.question["answers"][session.correct_index] == "d"
