"""Tests for the persistence stores."""

import json

import pytest

from turntally.state import (
    EntityKind,
    Game,
    JsonStore,
    MemoryStore,
    PersistenceStore,
    Player,
    QuickStartData,
    Session,
)

from .conftest import T0


@pytest.fixture
def json_store(tmp_path):
    return JsonStore(tmp_path / "data")


class TestJsonStore:

    def test_satisfies_protocol(self, json_store):
        assert isinstance(json_store, PersistenceStore)
        assert isinstance(MemoryStore(), PersistenceStore)

    def test_empty_store(self, json_store):
        for kind in EntityKind:
            assert json_store.get_all(kind) == []
        assert json_store.get_current() is None
        assert json_store.get_quick_start() == QuickStartData()

    def test_round_trip_collection(self, json_store):
        games = [Game(id="catan", title="Catan", avatar="🐑"), Game(title="Azul")]
        json_store.replace_all(EntityKind.GAME, games)

        loaded = json_store.get_all(EntityKind.GAME)
        assert loaded == games
        assert (json_store.data_dir / "games.json").exists()

    def test_replace_writes_backup(self, json_store):
        json_store.replace_all(EntityKind.PLAYER, [Player(id="ana", name="Ana")])
        json_store.replace_all(EntityKind.PLAYER, [Player(id="ben", name="Ben")])

        backup = json.loads((json_store.data_dir / "players.json.bak").read_text(encoding="utf-8"))
        assert backup[0]["id"] == "ana"
        assert [p.id for p in json_store.get_all(EntityKind.PLAYER)] == ["ben"]

    def test_corrupt_file_reads_empty(self, json_store):
        (json_store.data_dir / "players.json").write_text("{not json", encoding="utf-8")
        assert json_store.get_all(EntityKind.PLAYER) == []

    def test_invalid_records_read_empty(self, json_store):
        (json_store.data_dir / "games.json").write_text('[{"avatar": "x"}]', encoding="utf-8")
        assert json_store.get_all(EntityKind.GAME) == []

    def test_current_slot(self, json_store):
        session = Session(game_id="catan", player_ids=["ana", "ben"], start_time=T0)
        json_store.set_current(session)
        assert json_store.get_current() == session

        json_store.set_current(None)
        assert json_store.get_current() is None
        assert not (json_store.data_dir / JsonStore.CURRENT_FILE).exists()

    def test_corrupt_current_is_ignored(self, json_store):
        (json_store.data_dir / JsonStore.CURRENT_FILE).write_text("[]", encoding="utf-8")
        assert json_store.get_current() is None

    def test_quick_start(self, json_store):
        data = QuickStartData()
        data.record("catan", ["ben", "ana"], T0)
        json_store.set_quick_start(data)
        assert json_store.get_quick_start() == data

    def test_reopen_sees_saved_data(self, tmp_path):
        JsonStore(tmp_path).replace_all(EntityKind.GAME, [Game(id="catan", title="Catan")])
        assert JsonStore(tmp_path).get_all(EntityKind.GAME)[0].title == "Catan"


class TestMemoryStore:

    def test_reads_are_copies(self, memory_store):
        memory_store.replace_all(EntityKind.PLAYER, [Player(id="ana", name="Ana")])
        player = memory_store.get_all(EntityKind.PLAYER)[0]
        player.name = "Changed"
        assert memory_store.get_all(EntityKind.PLAYER)[0].name == "Ana"

    def test_writes_are_copies(self, memory_store):
        session = Session(game_id="catan", player_ids=["ana", "ben"], start_time=T0)
        memory_store.set_current(session)
        session.turns[0].append(99)
        assert memory_store.get_current().turns == [[], []]

    def test_clear(self, seeded_store):
        seeded_store.set_current(Session(game_id="catan", player_ids=["a", "b"], start_time=T0))
        seeded_store.clear()
        assert seeded_store.get_all(EntityKind.GAME) == []
        assert seeded_store.get_current() is None


class TestQuickStart:

    def test_repeat_play_counts_up(self):
        data = QuickStartData()
        data.record("catan", ["ana", "ben"], T0)
        data.record("catan", ["ben", "ana"], T0 + 1000)

        assert len(data.recent_games) == 1
        assert data.recent_games[0].play_count == 2
        assert data.recent_games[0].last_played == T0 + 1000
        assert data.recent_player_combinations[0].use_count == 2

    def test_newest_first_and_capped(self):
        data = QuickStartData()
        for i in range(12):
            data.record(f"game-{i}", ["ana", f"p{i}"], T0 + i)

        assert len(data.recent_games) == 10
        assert data.recent_games[0].game_id == "game-11"
        assert len(data.recent_player_combinations) == 5
        assert data.recent_player_combinations[0].player_ids == ["ana", "p11"]
