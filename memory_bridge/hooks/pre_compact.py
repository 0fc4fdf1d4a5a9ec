"""
Pre-compact hook.

Saves a summary of the current session before the host compacts its
context, then prunes the project to its rolling window.

Usage:
    memory-bridge-pre-compact < payload.json
"""

import logging
import sys

from memory_bridge.config.settings import Settings
from memory_bridge.memory.integrate import MemoryIntegration
from memory_bridge.memory.outcome import Ok, Outcome
from memory_bridge.memory.schemas import HookInput
from .common import run_hook


logger = logging.getLogger(__name__)


def handle(hook: HookInput, settings: Settings) -> Outcome:
    """Extract and store the session summary."""
    outcome = MemoryIntegration(settings).save_session(hook)
    
    if isinstance(outcome, Ok):
        summary = outcome.data
        message = f"Saved session {summary.session_id} ({len(summary.decisions)} decisions)"
        if summary.skipped_lines:
            message += f", skipped {summary.skipped_lines} unparseable line(s)"
        logger.info(message)
    
    return outcome


def main() -> int:
    """CLI entrypoint."""
    return run_hook(handle)


if __name__ == "__main__":
    sys.exit(main())
