"""
CLI utility for inspecting session memory.

Usage:
    memory-bridge --stats
    memory-bridge --list /path/to/project
    memory-bridge --list /path/to/project --json
"""

import argparse
import json
import os
import sys
from datetime import datetime
from pathlib import Path

from memory_bridge.config.settings import Settings
from memory_bridge.memory.errors import MemoryBridgeError
from memory_bridge.persist import SessionStore, query_recent


def format_time(ts: float) -> str:
    """Format unix timestamp as human-readable string."""
    if not ts:
        return "never"

    dt = datetime.fromtimestamp(ts)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def show_stats(db_path: Path) -> int:
    """
    Display per-project session counts.

    Args:
        db_path: Path to the memory database
    """
    if not db_path.exists():
        print(f"No memory database found: {db_path}")
        return 1

    print(f"Session memory: {db_path}\n")

    with SessionStore(db_path) as store:
        rows = store.stats()

    print(f"{'Sessions':>8}  {'Oldest':<19}  {'Newest':<19}  Project")
    print("=" * 80)

    total = 0
    for row in rows:
        total += row["count"]
        print(
            f"{row['count']:>8}  {format_time(row['oldest_ts']):<19}  "
            f"{format_time(row['newest_ts']):<19}  {row['project_path']}"
        )

    print("=" * 80)
    print(f"{total:>8}  sessions across {len(rows)} project(s)")
    return 0


def list_sessions(db_path: Path, project_path: str, limit: int, as_json: bool = False) -> int:
    """
    Print the most recent sessions for a project, newest first.

    Args:
        db_path: Path to the memory database
        project_path: Project directory
        limit: Maximum sessions to show
        as_json: Emit structured JSON instead of text
    """
    project_path = os.path.abspath(project_path)
    sessions = query_recent(db_path, project_path, limit)

    if as_json:
        print(json.dumps([s.to_storage_dict() for s in sessions], indent=2))
        return 0

    if not sessions:
        print(f"No sessions stored for {project_path}")
        return 0

    for i, session in enumerate(sessions, start=1):
        print(f"[{i}] {format_time(session.created_at)}  session {session.session_id}")
        if session.initial_request:
            print(f"    Request: {session.initial_request}")
        for decision in session.decisions:
            print(f"    {decision}")
        print()

    return 0


def main():
    """CLI entrypoint."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Inspect session memory (per-project stats, recent sessions)"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show per-project session counts",
    )
    parser.add_argument(
        "--list",
        metavar="PROJECT",
        type=str,
        help="List recent sessions for a project directory",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.store.max_sessions,
        help=f"Maximum sessions to list (default: {settings.store.max_sessions})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print listed sessions as JSON",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=Path(settings.store.db_path).expanduser(),
        help=f"Memory database (default: {settings.store.db_path})",
    )

    args = parser.parse_args()

    # Require at least one action
    if not args.stats and not args.list:
        parser.print_help()
        print("\nError: Must specify --stats or --list")
        sys.exit(1)

    try:
        if args.stats:
            exit_code = show_stats(args.db)
            if exit_code != 0:
                sys.exit(exit_code)

        if args.list:
            sys.exit(list_sessions(args.db, args.list, args.limit, as_json=args.json))
    except MemoryBridgeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
