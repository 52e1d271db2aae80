"""
Command-line interface for TurnTally.

Read-only reports over the data directory, plus session deletion.

Usage:
    turntally leaderboard --category fastest-average
    turntally players
    turntally sessions
    turntally delete-session 3f2a9c1b
"""

import argparse
import logging
import sys
from pathlib import Path

from ..config import load_config
from ..state import EntityKind, SessionManager
from ..state.schema import UNKNOWN_PLAYER_NAME
from ..stats import LeaderboardCategory, LeaderboardEngine, StatsAggregator
from ..systems.session import SessionPhase
from .renderer import (
    console,
    render_games,
    render_leaderboard,
    render_overview,
    render_players,
    render_sessions,
    render_timer,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="turntally",
        description="Turn timing statistics and leaderboards for tabletop games",
    )
    parser.add_argument(
        "--data-dir",
        default="data",
        help="Directory holding TurnTally data (default: ./data)",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    commands = parser.add_subparsers(dest="command", required=True)

    board = commands.add_parser("leaderboard", help="Show leaderboards")
    board.add_argument(
        "--category",
        choices=[c.value for c in LeaderboardCategory],
        help="Only this category (default: all)",
    )
    commands.add_parser("players", help="Per-player statistics")
    commands.add_parser("games", help="Per-game statistics")
    commands.add_parser("overview", help="Totals across everything")
    commands.add_parser("sessions", help="Session history, newest first")
    commands.add_parser("current", help="The session in progress")

    delete = commands.add_parser("delete-session", help="Delete a finished session")
    delete.add_argument("session_id", help="Session ID or unique prefix")

    return parser


def _resolve_session_id(manager: SessionManager, prefix: str) -> str | None:
    """Full session ID from an ID or unique prefix."""
    matches = [r.session.id for r in manager.list_sessions() if r.session.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        console.print(f"[yellow]Ambiguous session ID '{prefix}' matches {len(matches)} sessions[/yellow]")
    return None


def show_leaderboards(manager: SessionManager, category: str | None) -> int:
    engine = LeaderboardEngine(manager.store, clock=manager.clock, config=manager.config)
    if category:
        key = LeaderboardCategory(category)
        console.print(render_leaderboard(key, engine.category(key), engine.describe(key)))
        return 0

    for key, entries in engine.compute().items():
        console.print(render_leaderboard(LeaderboardCategory(key), entries, engine.describe(key)))
    return 0


def show_current(manager: SessionManager) -> int:
    state = manager.open_session(use_ticker=False)
    if state.session is None:
        console.print("No session in progress.")
        return 0

    names = {p.id: p.name for p in manager.store.get_all(EntityKind.PLAYER)}
    state.tick()
    console.print(render_timer(
        names.get(state.current_player_id, UNKNOWN_PLAYER_NAME),
        state.turn_number,
        state.elapsed,
        state.warning,
    ))
    if state.phase == SessionPhase.PAUSED:
        console.print("[dim]Paused[/dim]")
    elif state.phase == SessionPhase.NOT_STARTED:
        console.print("[dim]Not started[/dim]")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    data_dir = Path(args.data_dir)
    config = load_config(data_dir)

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or config["debug"]) else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    manager = SessionManager(data_dir, config=config)

    if args.command == "leaderboard":
        return show_leaderboards(manager, args.category)

    if args.command == "current":
        return show_current(manager)

    if args.command == "sessions":
        console.print(render_sessions(manager.list_sessions()))
        return 0

    if args.command == "delete-session":
        session_id = _resolve_session_id(manager, args.session_id)
        if session_id is None or not manager.delete_session(session_id):
            console.print(f"[red]No session matching '{args.session_id}'[/red]")
            return 1
        console.print(f"Deleted session {session_id[:8]}")
        return 0

    stats = StatsAggregator(manager.store, config=config)
    if args.command == "players":
        console.print(render_players(stats.player_summaries()))
    elif args.command == "games":
        console.print(render_games(stats.game_summaries()))
    elif args.command == "overview":
        console.print(render_overview(stats.overview()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
