"""
Rich rendering for TurnTally reports.

Builds tables on the shared console; no state of its own.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import DEFAULT_CONFIG
from ..state.manager import SessionRecord
from ..state.schema import LeaderboardEntry
from ..stats.aggregator import GameSummary, Overview, PlayerSummary
from ..stats.leaderboard import CATEGORIES, LeaderboardCategory
from ..systems.anomaly import TimerWarning, WarningLevel
from .formatting import format_clock, format_duration, format_instant, format_value

console = Console()

# Timer colours by warning level
WARNING_STYLES: dict[WarningLevel, str] = {
    WarningLevel.FAST: "green",
    WarningLevel.NORMAL: "bold",
    WarningLevel.SLOW: "yellow",
    WarningLevel.VERY_SLOW: "dark_orange",
    WarningLevel.EXTREMELY_SLOW: "bold red",
}

RANK_MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


def render_leaderboard(
    category: LeaderboardCategory,
    entries: list[LeaderboardEntry],
    description: str | None = None,
) -> Table:
    spec = CATEGORIES[category]
    description = description or spec.description.format(days=DEFAULT_CONFIG["recent_window_days"])
    table = Table(title=f"{spec.label}: {description}", title_justify="left")
    table.add_column("Rank", justify="right")
    table.add_column("Player")
    table.add_column(spec.label, justify="right")

    if not entries:
        table.add_row("", Text("No data yet", style="dim"), "")
    for entry in entries:
        rank = RANK_MEDALS.get(entry.rank, str(entry.rank))
        name = f"{entry.player_avatar} {entry.player_name}" if entry.player_avatar else entry.player_name
        table.add_row(rank, name, format_value(entry.value, category))
    return table


def render_players(summaries: list[PlayerSummary]) -> Table:
    table = Table(title="Players", title_justify="left")
    for column in ("Player", "Sessions", "Turns", "Avg", "Fastest", "Slowest", "Total", "Games"):
        table.add_column(column, justify="left" if column == "Player" else "right")

    for s in sorted(summaries, key=lambda s: s.total_sessions, reverse=True):
        table.add_row(
            s.name,
            str(s.total_sessions),
            str(s.total_turns),
            format_duration(s.avg_turn_time),
            format_duration(s.fastest_turn),
            format_duration(s.slowest_turn),
            format_duration(s.total_time),
            str(s.games_played),
        )
    return table


def render_games(summaries: list[GameSummary]) -> Table:
    table = Table(title="Games", title_justify="left")
    table.add_column("Game")
    table.add_column("Sessions", justify="right")
    table.add_column("Players", justify="right")
    table.add_column("Avg length", justify="right")
    table.add_column("Last played")

    for s in sorted(summaries, key=lambda s: s.sessions_count, reverse=True):
        table.add_row(
            f"{s.avatar} {s.title}" if s.avatar else s.title,
            str(s.sessions_count),
            str(s.total_players),
            format_duration(s.avg_session_length),
            format_instant(s.last_played),
        )
    return table


def render_sessions(records: list[SessionRecord]) -> Table:
    table = Table(title="Session history", title_justify="left")
    table.add_column("ID")
    table.add_column("Game")
    table.add_column("Players")
    table.add_column("Started")
    table.add_column("Turns", justify="right")

    for record in records:
        session = record.session
        kind, image = record.game_image
        table.add_row(
            session.id[:8],
            f"{image} {record.game_title}" if kind == "avatar" else record.game_title,
            ", ".join(record.player_names),
            format_instant(session.start_time, with_time=True),
            str(len(session.completed_durations)),
        )
    return table


def render_overview(overview: Overview) -> Panel:
    lines = [
        f"Games: {overview.total_games}",
        f"Players: {overview.total_players}",
        f"Sessions: {overview.total_sessions}",
        f"Play time: {format_duration(overview.total_play_time)}",
    ]
    return Panel("\n".join(lines), title="Overview", expand=False)


def render_timer(player_name: str, turn_number: int, elapsed: int, warning: TimerWarning) -> Panel:
    """The live timer card for the current player."""
    body = Text(format_clock(elapsed), style=WARNING_STYLES[warning.level])
    if warning.should_pulse:
        body.stylize("blink")
    if warning.message:
        body.append(f"\n{warning.message}", style="italic")
    return Panel(body, title=f"{player_name}'s turn", subtitle=f"Turn {turn_number}", expand=False)
