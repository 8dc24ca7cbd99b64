import pytest
from conftest import make_game, make_score

from services.errors import InputValidationError, StoreError
from services.record_store import RecordStore


def test_create_game_initialises_statistics(store, fake_db):
    game = make_game(None, title="Neu", plays=7, rating=3.0)
    game_id = store.create_game(game)

    doc = fake_db.collection("games").docs[game_id]
    assert doc["plays"] == 0
    assert doc["ratings"] == []
    assert doc["rating"] == 0
    assert doc["createdAt"] is not None
    assert len(doc["questions"]) == 18

    loaded = store.get_game(game_id)
    assert loaded.title == "Neu"
    assert loaded.creator == "Anna"


def test_create_game_failure_raises(store, fake_db):
    fake_db.fail = True
    with pytest.raises(StoreError):
        store.create_game(make_game(None))


def test_list_games_newest_first_with_limit(fake_db):
    store = RecordStore(fake_db, games_limit=2)
    ids = [store.create_game(make_game(None, title=t)) for t in ("eins", "zwei", "drei")]

    games = store.list_games()
    assert [g.id for g in games] == [ids[2], ids[1]]


def test_reads_degrade_to_empty(store, fake_db):
    store.create_game(make_game(None))
    fake_db.fail = True
    assert store.list_games() == []
    assert store.list_scores() == []
    assert store.get_game("doc1") is None


def test_increment_plays(store, fake_db):
    game_id = store.create_game(make_game(None))
    assert store.increment_plays(game_id) == {"ok": True}
    store.increment_plays(game_id)
    assert store.get_game(game_id).plays == 2


def test_increment_plays_is_best_effort(store):
    assert store.increment_plays("")["skipped"] is True
    result = store.increment_plays("missing")
    assert result["ok"] is False
    assert "error" in result


@pytest.mark.usefixtures("plain_transactions")
def test_rating_average_follows_appended_ratings(store):
    game_id = store.create_game(make_game(None))

    for r in (4, 5, 3):
        result = store.append_rating(game_id, r)
    assert result == {"ok": True, "rating": 4.0, "ratingCount": 3}

    game = store.get_game(game_id)
    assert game.ratings == [4, 5, 3]
    assert game.rating == 4.0


@pytest.mark.usefixtures("plain_transactions")
def test_equal_ratings_are_all_counted(store):
    game_id = store.create_game(make_game(None))
    store.append_rating(game_id, 5)
    store.append_rating(game_id, 5)
    result = store.append_rating(game_id, 2)
    assert result["ratingCount"] == 3
    assert result["rating"] == 4.0


@pytest.mark.usefixtures("plain_transactions")
def test_rating_unknown_game(store):
    result = store.append_rating("nope", 3)
    assert result["ok"] is False


@pytest.mark.parametrize("bad", [0, 6, 2.5, "4", None, True])
def test_rating_out_of_range_rejected(store, bad):
    with pytest.raises(InputValidationError):
        store.append_rating("g1", bad)


def test_scores_highest_first_and_per_player(store):
    store.create_score(make_score("A", money=100))
    store.create_score(make_score("B", money=1_000_000, completed=True))
    store.create_score(make_score("A", money=10_000))

    assert [s.earned_money for s in store.list_scores()] == [1_000_000, 10_000, 100]
    mine = store.list_scores("A")
    assert [s.earned_money for s in mine] == [10_000, 100]
    assert all(s.timestamp is not None for s in mine)


def test_create_score_failure_is_reported_not_raised(store, fake_db):
    fake_db.fail = True
    result = store.create_score(make_score("A"))
    assert result["ok"] is False


def test_sessions_round_trip(store):
    assert store.get_session("A") is None
    store.save_session("A", {"gameId": "g1", "level": 2})
    assert store.get_session("A")["level"] == 2
    store.delete_session("A")
    assert store.get_session("A") is None
