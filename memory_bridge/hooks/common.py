"""Shared plumbing for hook entrypoints: stdin payload, logging, exit boundary."""

import json
import logging
import sys
from typing import Callable, Optional, TextIO

from memory_bridge.config.settings import Settings
from memory_bridge.memory.outcome import Degraded, Outcome
from memory_bridge.memory.schemas import HookInput


LOG_FORMAT = "[MemoryBridge] %(message)s"

logger = logging.getLogger("memory_bridge.hooks")

HookHandler = Callable[[HookInput, Settings], Outcome]


def configure_logging(level="INFO", stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Route package diagnostics to stderr with the MemoryBridge prefix.
    
    Replaces handlers from a previous call so repeated invocations in one
    process don't duplicate output.
    
    Args:
        level: Level name or number
        stream: Output stream (defaults to the current sys.stderr)
    
    Returns:
        The package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    
    root = logging.getLogger("memory_bridge")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    
    return root


def read_hook_input(stream: TextIO) -> HookInput:
    """
    Parse the host payload from a stream.
    
    An empty stream yields a payload with every field missing.
    
    Raises:
        ValueError: The payload is not a JSON object
    """
    raw = stream.read()
    if not raw.strip():
        return HookInput()
    
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("hook payload is not a JSON object")
    
    return HookInput(**data)


def report(outcome: Outcome) -> None:
    """Log the reason of a degraded outcome."""
    if not isinstance(outcome, Degraded):
        return
    
    if outcome.failure:
        logger.warning(outcome.reason)
    else:
        logger.info(outcome.reason)


def run_hook(handler: HookHandler, stdin: Optional[TextIO] = None) -> int:
    """
    Run a hook handler behind the never-fail boundary.
    
    Args:
        handler: Callable taking (HookInput, Settings) and returning an Outcome
        stdin: Payload stream (defaults to sys.stdin)
    
    Returns:
        Process exit status, always 0
    """
    # Default level until settings are known, so config warnings are visible
    configure_logging()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    
    try:
        hook = read_hook_input(stdin or sys.stdin)
        outcome = handler(hook, settings)
    except Exception as e:
        # Never block the host's lifecycle step
        outcome = Degraded(f"Error: {e}")
    
    report(outcome)
    return 0
