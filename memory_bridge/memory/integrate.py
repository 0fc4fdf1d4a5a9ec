"""
Memory integration hooks for the session lifecycle.

Provides the write path (summarize a finished session and store it) and
the read path (recall recent sessions for the current project). Both
return an Outcome and never raise: memory is an enhancement, not a
dependency of the host workflow.
"""

import logging
from pathlib import Path
from typing import List, Optional

from memory_bridge.config.settings import Settings
from memory_bridge.persist.sqlite_store import SessionStore, query_recent
from .errors import MemoryBridgeError
from .extractor import TranscriptExtractor
from .outcome import Degraded, Ok, Outcome
from .schemas import HookInput, SessionSummary


logger = logging.getLogger(__name__)


class MemoryIntegration:
    """
    Integration layer between the hooks and the session store.

    Provides:
    - Post-session summary writing with rolling-window pruning
    - Session-start recall of the newest summaries
    """

    def __init__(self, settings: Settings, extractor: Optional[TranscriptExtractor] = None):
        """
        Initialize memory integration.

        Args:
            settings: Application settings
            extractor: Transcript extractor (built from settings if omitted)
        """
        self.settings = settings
        self.extractor = extractor or TranscriptExtractor.from_settings(settings.extract)

    @property
    def db_path(self) -> Path:
        return Path(self.settings.store.db_path).expanduser()

    def save_session(self, hook: HookInput) -> Outcome:
        """
        Summarize a session transcript and persist it.

        The summary is inserted and the project pruned to the configured
        window in one transaction. Nothing is written when the transcript
        yields no summary.

        Args:
            hook: Host payload with session id, transcript path, and cwd

        Returns:
            Ok(stored SessionSummary) or Degraded(reason)
        """
        summary = self.extractor.extract_file(hook.transcript_path)
        if summary is None:
            return Degraded("No summary extracted", failure=False)

        project_path = hook.resolve_project_path()
        session_id = hook.resolve_session_id()

        try:
            with SessionStore(self.db_path) as store:
                stored = store.save(
                    project_path,
                    session_id,
                    summary,
                    window_size=self.settings.store.max_sessions,
                )
        except MemoryBridgeError as e:
            return Degraded(f"Could not save session {session_id}: {e}")

        # Carry the extraction diagnostics through for reporting
        stored = stored.model_copy(update={
            "message_count": summary.message_count,
            "skipped_lines": summary.skipped_lines,
        })
        return Ok(stored)

    def load_recent_sessions(self, project_path: Optional[str] = None) -> Outcome:
        """
        Recall the most recent sessions for a project.

        A missing database or a project without sessions is a normal
        outcome and yields Ok([]).

        Args:
            project_path: Partition key (defaults to the working directory)

        Returns:
            Ok(list of SessionSummary, newest first) or Degraded(reason)
        """
        if project_path is None:
            project_path = HookInput().resolve_project_path()

        try:
            sessions: List[SessionSummary] = query_recent(
                self.db_path,
                project_path,
                limit=self.settings.store.max_sessions,
            )
        except MemoryBridgeError as e:
            return Degraded(f"Error loading sessions: {e}")

        return Ok(sessions)


def create_memory_integration(settings: Optional[Settings] = None) -> MemoryIntegration:
    """
    Factory function to create memory integration.

    Args:
        settings: Application settings (read from the environment if omitted)

    Returns:
        MemoryIntegration instance
    """
    if settings is None:
        settings = Settings.from_env()
    return MemoryIntegration(settings)
