"""Tests for the command-line reports."""

import pytest
from rich.console import Console

from turntally.interface.cli import build_parser, main
from turntally.interface.formatting import format_clock, format_duration, format_instant, format_value
from turntally.interface.renderer import render_leaderboard, render_sessions
from turntally.state import EntityKind, Game, Player, Session, SessionManager
from turntally.state.manager import SessionRecord
from turntally.stats import LeaderboardCategory

from .conftest import T0, FakeClock, play_turns


@pytest.fixture
def data_dir(tmp_path):
    """A JSON data directory with one finished Catan session."""
    clock = FakeClock()
    manager = SessionManager(tmp_path, clock=clock)
    manager.store.replace_all(EntityKind.GAME, [Game(id="catan", title="Catan")])
    manager.store.replace_all(EntityKind.PLAYER, [
        Player(id="ana", name="Ana"),
        Player(id="ben", name="Ben"),
    ])
    manager.create_session("catan", ["ana", "ben"])
    state = manager.open_session(use_ticker=False)
    state.start()
    play_turns(state, clock, [20, 60, 25, 58, 22, 65])
    state.end()
    return tmp_path


class TestParser:

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_category(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["leaderboard", "--category", "slowest"])


class TestCommands:

    def test_leaderboard(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "leaderboard"]) == 0
        out = capsys.readouterr().out
        assert "Fastest Average" in out
        assert "Ana" in out

    def test_single_category(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "leaderboard", "--category", "total-time"]) == 0
        out = capsys.readouterr().out
        assert "Total Play Time" in out
        assert "Fastest Average" not in out

    @pytest.mark.parametrize("command,expected", [
        ("players", "Ben"),
        ("games", "Catan"),
        ("sessions", "Catan"),
        ("overview", "Sessions"),
    ])
    def test_reports(self, data_dir, capsys, command, expected):
        assert main(["--data-dir", str(data_dir), command]) == 0
        assert expected in capsys.readouterr().out

    def test_current_without_session(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "current"]) == 0
        assert "No session in progress" in capsys.readouterr().out

    def test_delete_session_by_prefix(self, data_dir, capsys):
        session_id = SessionManager(data_dir).list_sessions()[0].session.id

        assert main(["--data-dir", str(data_dir), "delete-session", session_id[:8]]) == 0
        assert SessionManager(data_dir).list_sessions() == []

    def test_delete_unknown_session(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "delete-session", "zzzz"]) == 1
        assert "No session matching" in capsys.readouterr().out


class TestFormatting:

    @pytest.mark.parametrize("seconds,expected", [
        (45, "45s"),
        (125, "2m 5s"),
        (3780, "1h 3m"),
        (61.0, "1m 1s"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_clock(self):
        assert format_clock(0) == "00:00"
        assert format_clock(125) == "02:05"

    def test_format_instant_missing(self):
        assert format_instant(None) == "-"

    def test_format_value(self):
        assert format_value(61.0, "fastest-average") == "1m 1s"
        assert format_value(3, "most-sessions") == "3"


def rendered(renderable) -> str:
    console = Console(width=120, record=True)
    console.print(renderable)
    return console.export_text()


class TestRenderer:

    def test_sessions_show_game_avatar(self):
        record = SessionRecord(
            session=Session(id="abcdef123456", game_id="catan", player_ids=["ana", "ben"], start_time=T0),
            game_title="Catan",
            game_image=("avatar", "🐑"),
            player_names=["Ana", "Ben"],
        )
        out = rendered(render_sessions([record]))
        assert "🐑 Catan" in out
        assert "abcdef12" in out

    def test_sessions_skip_thumbnail_urls(self):
        record = SessionRecord(
            session=Session(game_id="azul", player_ids=["ana", "ben"], start_time=T0),
            game_title="Azul",
            game_image=("thumbnail", "https://example.com/azul.png"),
            player_names=["Ana", "Ben"],
        )
        out = rendered(render_sessions([record]))
        assert "Azul" in out
        assert "example.com" not in out

    def test_leaderboard_description(self):
        out = rendered(render_leaderboard(LeaderboardCategory.MOST_ACTIVE, [], "Most sessions in the last 7 days"))
        assert "last 7 days" in out
        default = rendered(render_leaderboard(LeaderboardCategory.MOST_ACTIVE, []))
        assert "last 30 days" in default
