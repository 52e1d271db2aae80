"""Display formatting for durations, instants and leaderboard values."""

from datetime import datetime

from ..stats.leaderboard import TIME_CATEGORIES, LeaderboardCategory


def format_duration(seconds: float) -> str:
    """45s, 2m 5s, 1h 3m."""
    seconds = int(round(seconds))
    if seconds < 60:
        return f"{seconds}s"
    mins, secs = divmod(seconds, 60)
    if mins < 60:
        return f"{mins}m {secs}s"
    hours, mins = divmod(mins, 60)
    return f"{hours}h {mins}m"


def format_clock(seconds: int) -> str:
    """Live timer display, MM:SS."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def format_instant(epoch_ms: int | None, with_time: bool = False) -> str:
    if epoch_ms is None:
        return "-"
    moment = datetime.fromtimestamp(epoch_ms / 1000)
    return moment.strftime("%Y-%m-%d %H:%M" if with_time else "%Y-%m-%d")


def format_value(value: float, category: LeaderboardCategory | str) -> str:
    """Leaderboard value: durations for time categories, plain counts otherwise."""
    if LeaderboardCategory(category) in TIME_CATEGORIES:
        return format_duration(value)
    return str(int(value))
