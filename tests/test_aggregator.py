"""Tests for per-player and per-game statistics."""

import pytest

from turntally.state import EntityKind, Game, GameSession, Player, PlayerTurn, Session
from turntally.stats import StatsAggregator, summarize_game, summarize_player
from turntally.stats.aggregator import DAY_MS

from .conftest import T0


def game_session(game_id, durations, start=T0, end=T0 + 600_000, session_id="s1"):
    return GameSession(
        session_id=session_id,
        game_id=game_id,
        session_start=start,
        session_end=end,
        player_turns=[PlayerTurn(duration=d, timestamp=end or start) for d in durations],
    )


def player_with(player_id, *sessions):
    player = Player(id=player_id, name=player_id.title())
    for session in sessions:
        player.record_session(session)
    return player


class TestSummarizePlayer:

    def test_no_history_is_all_zero(self):
        summary = summarize_player(Player(id="ana", name="Ana"), now=T0)
        assert summary.total_sessions == 0
        assert summary.total_turns == 0
        assert summary.avg_turn_time == 0.0
        assert summary.fastest_turn == 0
        assert summary.slowest_turn == 0

    def test_session_with_no_turns(self):
        summary = summarize_player(player_with("ana", game_session("catan", [])), now=T0)
        assert summary.total_sessions == 1
        assert summary.total_turns == 0
        assert summary.avg_turn_time == 0.0
        assert summary.fastest_turn == 0

    def test_metrics(self):
        player = player_with(
            "ana",
            game_session("catan", [20, 25, 22], session_id="s1"),
            game_session("azul", [150, 10], session_id="s2"),
        )
        summary = summarize_player(player, now=T0 + DAY_MS)

        assert summary.total_sessions == 2
        assert summary.total_turns == 5
        assert summary.total_time == 227
        assert summary.avg_turn_time == pytest.approx(45.4)
        assert summary.fastest_turn == 10
        assert summary.slowest_turn == 150
        assert summary.games_played == 2
        assert summary.turns_under_30s == 4
        assert summary.turns_over_2min == 1

    def test_threshold_edges_excluded(self):
        """Exactly 30s is not quick and exactly 120s is not long."""
        summary = summarize_player(player_with("ana", game_session("catan", [30, 120])), now=T0)
        assert summary.turns_under_30s == 0
        assert summary.turns_over_2min == 0

    def test_games_played_counts_distinct_games(self):
        player = player_with(
            "ana",
            game_session("catan", [10], session_id="s1"),
            game_session("catan", [10], session_id="s2"),
        )
        assert summarize_player(player, now=T0).games_played == 1

    def test_recent_window(self):
        now = T0 + 40 * DAY_MS
        player = player_with(
            "ana",
            game_session("catan", [10], start=T0, session_id="old"),
            game_session("catan", [10], start=now - 30 * DAY_MS, session_id="edge"),
            game_session("catan", [10], start=now - DAY_MS, session_id="new"),
        )
        assert summarize_player(player, now=now).recent_sessions == 1
        assert summarize_player(player, now=now, recent_window_days=60).recent_sessions == 3

    def test_pure(self):
        player = player_with("ana", game_session("catan", [20, 25, 22]))
        first = summarize_player(player, now=T0)
        second = summarize_player(player, now=T0)
        assert first.model_dump_json() == second.model_dump_json()


class TestSummarizeGame:

    def test_counts_player_sessions(self):
        players = [
            player_with("ana", game_session("catan", [10], end=T0 + 60_000)),
            player_with("ben", game_session("catan", [10], end=T0 + 120_000)),
            player_with("cy", game_session("azul", [10])),
        ]
        summary = summarize_game("catan", players, Game(id="catan", title="Catan"))

        assert summary.title == "Catan"
        assert summary.sessions_count == 2
        assert summary.total_players == 2
        assert summary.avg_session_length == pytest.approx(90.0)
        assert summary.last_played == T0

    def test_unended_session_not_averaged(self):
        players = [
            player_with(
                "ana",
                game_session("catan", [10], end=None, session_id="s1"),
                game_session("catan", [10], end=T0 + 30_000, session_id="s2"),
            )
        ]
        summary = summarize_game("catan", players)
        assert summary.sessions_count == 2
        assert summary.avg_session_length == pytest.approx(30.0)

    def test_no_sessions(self):
        summary = summarize_game("catan", [Player(id="ana", name="Ana")])
        assert summary.sessions_count == 0
        assert summary.avg_session_length == 0.0
        assert summary.last_played is None

    def test_unknown_game(self):
        summary = summarize_game("gone", [])
        assert summary.title == "Unknown Game"
        assert summary.avatar == "🎲"


class TestStatsAggregator:

    @pytest.fixture
    def stats_store(self, memory_store):
        memory_store.replace_all(EntityKind.GAME, [Game(id="catan", title="Catan")])
        memory_store.replace_all(EntityKind.PLAYER, [
            player_with("ana", game_session("catan", [20, 25, 22]), game_session("deleted", [5], session_id="s2")),
            player_with("ben", game_session("catan", [60, 58, 65])),
            Player(id="cy", name="Cy"),
        ])
        memory_store.replace_all(EntityKind.SESSION, [
            Session(id="s1", game_id="catan", player_ids=["ana", "ben"], start_time=T0, end_time=T0 + 600_000),
        ])
        return memory_store

    def test_player_summaries_in_store_order(self, stats_store, fake_clock):
        summaries = StatsAggregator(stats_store, clock=fake_clock).player_summaries()
        assert [s.player_id for s in summaries] == ["ana", "ben", "cy"]
        assert summaries[1].avg_turn_time == pytest.approx(61.0)
        assert summaries[1].slowest_turn == 65

    def test_player_summary_lookup(self, stats_store, fake_clock):
        aggregator = StatsAggregator(stats_store, clock=fake_clock)
        assert aggregator.player_summary("ben").total_turns == 3
        assert aggregator.player_summary("nobody") is None

    def test_orphaned_games_reported(self, stats_store, fake_clock):
        summaries = StatsAggregator(stats_store, clock=fake_clock).game_summaries()
        assert [s.game_id for s in summaries] == ["catan", "deleted"]
        assert summaries[1].title == "Unknown Game"

    def test_game_summary(self, stats_store, fake_clock):
        summary = StatsAggregator(stats_store, clock=fake_clock).game_summary("catan")
        assert summary.sessions_count == 2
        assert summary.total_players == 2

    def test_overview(self, stats_store, fake_clock):
        overview = StatsAggregator(stats_store, clock=fake_clock).overview()
        assert overview.total_games == 1
        assert overview.total_players == 3
        assert overview.total_sessions == 1
        assert overview.total_play_time == 67 + 5 + 183

    def test_reading_does_not_mutate_store(self, stats_store, fake_clock):
        before = [p.model_dump_json() for p in stats_store.get_all(EntityKind.PLAYER)]
        StatsAggregator(stats_store, clock=fake_clock).overview()
        after = [p.model_dump_json() for p in stats_store.get_all(EntityKind.PLAYER)]
        assert before == after
