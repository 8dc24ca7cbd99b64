"""
Shared fixtures: an in-memory stand-in for the Firestore client and helpers
to build games, scores and LLM payloads.
"""
import copy
import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from firebase_admin import firestore

from services.record_store import RecordStore
from services.stats.models import Game, PlayerScore, Question


# ---------------------------------------------------------------------
# Fake Firestore
# ---------------------------------------------------------------------

class FakeSnapshot:
    def __init__(self, ref, data):
        self.reference = ref
        self.id = ref.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def _apply(self, existing, data):
        out = dict(existing or {})
        for key, value in data.items():
            if value is firestore.SERVER_TIMESTAMP:
                out[key] = self._collection.db.now()
            elif isinstance(value, firestore.Increment):
                out[key] = out.get(key, 0) + value.value
            else:
                out[key] = copy.deepcopy(value)
        return out

    def get(self, transaction=None):
        self._collection.db.check()
        return FakeSnapshot(self, self._collection.docs.get(self.id))

    def set(self, data, merge=False):
        self._collection.db.check()
        existing = self._collection.docs.get(self.id) if merge else None
        self._collection.docs[self.id] = self._apply(existing, data)

    def update(self, data):
        self._collection.db.check()
        if self.id not in self._collection.docs:
            raise LookupError(f"No document to update: {self.id}")
        self._collection.docs[self.id] = self._apply(self._collection.docs[self.id], data)

    def delete(self):
        self._collection.db.check()
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, limit=None):
        self._collection = collection
        self._filters = list(filters)
        self._order = order
        self._limit = limit

    def where(self, field, op, value):
        assert op == "==", "fake only supports equality filters"
        return FakeQuery(self._collection, self._filters + [(field, value)], self._order, self._limit)

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self._collection, self._filters, (field, direction), self._limit)

    def limit(self, n):
        return FakeQuery(self._collection, self._filters, self._order, n)

    def stream(self):
        self._collection.db.check()
        items = [
            (doc_id, data) for doc_id, data in self._collection.docs.items()
            if all(data.get(f) == v for f, v in self._filters)
        ]
        if self._order:
            field, direction = self._order
            items.sort(key=lambda item: item[1].get(field), reverse=direction == firestore.Query.DESCENDING)
        if self._limit is not None:
            items = items[:self._limit]
        for doc_id, data in items:
            yield FakeSnapshot(FakeDocumentRef(self._collection, doc_id), data)


class FakeCollection(FakeQuery):
    def __init__(self, db, name):
        self.db = db
        self.name = name
        self.docs = {}
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or self.db.new_id())

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self.db.now(), ref


class FakeTransaction:
    def update(self, ref, data):
        ref.update(data)

    def set(self, ref, data, merge=False):
        ref.set(data, merge=merge)


class FakeFirestore:
    def __init__(self):
        self.collections = {}
        self.fail = False
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)
        self._base = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def check(self):
        if self.fail:
            raise RuntimeError("firestore unavailable")

    def now(self):
        return self._base + timedelta(seconds=next(self._ticks))

    def new_id(self):
        return f"doc{next(self._ids)}"

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    def transaction(self):
        return FakeTransaction()


# ---------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------

def question_payload(level, n=0, hint=True):
    item = {
        "level": level,
        "q": f"Frage {level}.{n}?",
        "a": [f"A{level}{n}", f"B{level}{n}", f"C{level}{n}", f"D{level}{n}"],
        "correct": (level + n) % 4,
    }
    if hint:
        item["hint"] = f"Tipp {level}.{n}"
    return item


def questions_payload():
    return [question_payload(level, n) for level in range(1, 7) for n in range(3)]


def make_game(game_id="g1", title="Spiel", topic="Biologie", difficulty="Mittel",
              creator="Anna", plays=0, rating=0.0, questions=None):
    if questions is None:
        questions = [Question.from_doc(q) for q in questions_payload()]
    return Game(id=game_id, title=title, topic=topic, difficulty=difficulty,
                creator=creator, questions=questions, plays=plays, rating=rating)


def make_score(player, game_id="g1", money=0, completed=False, title=None, level=1, score_id=None):
    return PlayerScore(id=score_id, player_name=player, game_id=game_id,
                       game_title=title or f"Titel {game_id}", level=level,
                       earned_money=money, completed=completed)


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_openai(content=None, error=None):
    completions = StubCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def store(fake_db):
    return RecordStore(fake_db)


@pytest.fixture
def plain_transactions(monkeypatch):
    """Run @firestore.transactional functions directly against the fake."""
    monkeypatch.setattr(firestore, "transactional", lambda fn: fn)
