"""
Session-start hook.

Loads the most recent session summaries for the current project and
prints them as additional context for the new session.

Usage:
    memory-bridge-session-start < payload.json
"""

import json
import logging
import sys

from memory_bridge.config.settings import Settings
from memory_bridge.memory.formatter import format_context, session_start_payload
from memory_bridge.memory.integrate import MemoryIntegration
from memory_bridge.memory.outcome import Ok, Outcome
from memory_bridge.memory.schemas import HookInput
from .common import run_hook


logger = logging.getLogger(__name__)


def handle(hook: HookInput, settings: Settings) -> Outcome:
    """Recall recent sessions and write the context payload to stdout."""
    outcome = MemoryIntegration(settings).load_recent_sessions(hook.resolve_project_path())
    
    if not isinstance(outcome, Ok) or not outcome.data:
        return outcome
    
    sessions = outcome.data
    context = format_context(
        sessions,
        context_chars=settings.format.context_chars,
        decisions_per_session=settings.format.decisions_per_session,
    )
    
    print(json.dumps(session_start_payload(context)))
    logger.info(f"Injected {len(sessions)} session(s) of context")
    
    return outcome


def main() -> int:
    """CLI entrypoint."""
    return run_hook(handle)


if __name__ == "__main__":
    sys.exit(main())
