"""
Rendering of recalled sessions for the host.

Turns a newest-first list of SessionSummary into a markdown context block
and wraps it in the session-start payload the host expects.
"""

from datetime import datetime
from typing import List, Optional

from .schemas import SessionSummary


FOOTER = "*Memory provided by memory-bridge*"


def format_date(ts: Optional[float]) -> str:
    """Format a unix timestamp as a local date."""
    if not ts:
        return "unknown date"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")


def snippet(text: str, max_chars: int = 200) -> str:
    """Get truncated text for display."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars - 3] + "..."


def format_context(
    sessions: List[SessionSummary],
    context_chars: int = 200,
    decisions_per_session: int = 5
) -> str:
    """
    Format recalled sessions as a markdown context block.

    Args:
        sessions: Summaries, newest first
        context_chars: Maximum characters of each initial request
        decisions_per_session: Maximum decision lines shown per session

    Returns:
        Markdown text, or an empty string when there are no sessions
    """
    if not sessions:
        return ""

    lines = [
        "## Previous Session Context",
        "",
        f"*Memory from last {len(sessions)} session(s) in this project:*",
        "",
    ]

    for i, session in enumerate(sessions, start=1):
        lines.append(f"### Session {i} ({format_date(session.created_at)})")

        if session.initial_request:
            lines.append(f"**Context**: {snippet(session.initial_request, context_chars)}")

        if session.decisions:
            lines.append("**Key actions**:")
            lines.extend(session.decisions[:decisions_per_session])

        lines.append("")

    lines.append("---")
    lines.append(FOOTER)

    return "\n".join(lines)


def session_start_payload(context: str) -> dict:
    """Wrap a context block in the host's SessionStart hook output."""
    return {
        "hookSpecificOutput": {
            "hookEventName": "SessionStart",
            "additionalContext": context,
        }
    }
