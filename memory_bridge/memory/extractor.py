"""
Transcript extraction.

Converts a JSONL session transcript into a bounded SessionSummary: the
first user request plus the decision lines found in the most recent
assistant messages.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from .schemas import MAX_DECISIONS, MAX_REQUEST_CHARS, Message, SessionSummary


logger = logging.getLogger(__name__)

DEFAULT_VERBS = (
    "Created",
    "Updated",
    "Fixed",
    "Added",
    "Removed",
    "Changed",
    "Implemented",
    "Configured",
)


class DecisionMatcher:
    """
    Recognizes decision lines.

    A decision line starts (after leading whitespace) with a ``-`` or ``*``
    bullet, whitespace, and one of the action verbs, case-insensitively:

        >>> DecisionMatcher().matches("  - Fixed login bug")
        True
        >>> DecisionMatcher().matches("- reviewed code")
        False
    """

    def __init__(self, verbs: Iterable[str] = DEFAULT_VERBS):
        self.verbs = tuple(verbs)
        if not self.verbs:
            # Nothing can match an empty verb list
            self._pattern = None
        else:
            alternatives = "|".join(re.escape(v) for v in self.verbs)
            self._pattern = re.compile(rf"^[-*]\s+(?:{alternatives})", re.IGNORECASE)

    def matches(self, line: str) -> bool:
        if self._pattern is None:
            return False
        return self._pattern.match(line.lstrip()) is not None

    def find(self, text: str) -> List[str]:
        """Return matching lines of ``text``, stripped, in order."""
        return [line.strip() for line in text.splitlines() if self.matches(line)]


def parse_transcript_lines(lines: Iterable[str]) -> Tuple[List[Message], int, int]:
    """
    Parse JSONL transcript lines into messages.

    Each non-blank line is parsed on its own; a line that is not a JSON
    object or not a valid message is dropped.

    Args:
        lines: Raw transcript lines

    Returns:
        (messages, non_blank_line_count, skipped_line_count)
    """
    messages = []
    non_blank = 0
    skipped = 0

    for line in lines:
        if not line.strip():
            continue
        non_blank += 1

        try:
            record = json.loads(line)
            if not isinstance(record, dict):
                raise ValueError("transcript record is not an object")
            messages.append(Message.from_record(record))
        except (json.JSONDecodeError, ValueError, TypeError, ValidationError):
            skipped += 1

    return messages, non_blank, skipped


class TranscriptExtractor:
    """
    Builds session summaries from transcripts.

    Extraction is read-only and best-effort: every failure mode results in
    ``None`` ("nothing to persist") rather than an exception.
    """

    def __init__(
        self,
        max_request_chars: int = MAX_REQUEST_CHARS,
        max_decisions: int = MAX_DECISIONS,
        assistant_window: int = 5,
        matcher: Optional[DecisionMatcher] = None
    ):
        """
        Initialize extractor.

        Args:
            max_request_chars: Prefix length kept from the first user message
            max_decisions: Maximum decision lines per summary
            assistant_window: Number of trailing assistant messages mined for decisions
            matcher: Decision line matcher (default verbs if omitted)
        """
        self.max_request_chars = min(max_request_chars, MAX_REQUEST_CHARS)
        self.max_decisions = min(max_decisions, MAX_DECISIONS)
        self.assistant_window = assistant_window
        self.matcher = matcher or DecisionMatcher()

    @classmethod
    def from_settings(cls, cfg) -> "TranscriptExtractor":
        """Create an extractor from an ExtractCfg."""
        return cls(
            max_request_chars=cfg.max_request_chars,
            max_decisions=cfg.max_decisions,
            assistant_window=cfg.assistant_window,
            matcher=DecisionMatcher(cfg.decision_verbs),
        )

    def extract(self, messages: Sequence[Message], skipped_lines: int = 0) -> Optional[SessionSummary]:
        """
        Summarize an ordered message sequence.

        Args:
            messages: Transcript messages, oldest first
            skipped_lines: Unparseable lines dropped before this call

        Returns:
            SessionSummary, or None for an empty transcript
        """
        if not messages:
            return None

        user_messages = [m for m in messages if m.role == "user"]
        assistant_messages = [m for m in messages if m.role == "assistant"]

        initial_request = ""
        if user_messages:
            initial_request = user_messages[0].text[:self.max_request_chars]

        decisions = []
        for msg in assistant_messages[-self.assistant_window:]:
            decisions.extend(self.matcher.find(msg.text))

        return SessionSummary(
            initial_request=initial_request,
            decisions=decisions[:self.max_decisions],
            message_count=len(messages),
            skipped_lines=skipped_lines,
        )

    def extract_lines(self, lines: Iterable[str]) -> Optional[SessionSummary]:
        """
        Summarize raw JSONL transcript lines.

        Returns:
            SessionSummary, or None when no line could be parsed
        """
        messages, non_blank, skipped = parse_transcript_lines(lines)

        if non_blank == 0:
            return None

        if skipped:
            logger.debug("Dropped %d unparseable transcript line(s)", skipped)

        return self.extract(messages, skipped_lines=skipped)

    def extract_file(self, path: Optional[Union[str, Path]]) -> Optional[SessionSummary]:
        """
        Summarize a transcript file.

        Missing, unreadable, and empty transcripts all yield None.

        Args:
            path: Path to the JSONL transcript

        Returns:
            SessionSummary or None
        """
        if not path:
            return None

        transcript = Path(path)

        try:
            if not transcript.is_file():
                return None
            content = transcript.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read transcript %s: %s", transcript, e)
            return None

        try:
            return self.extract_lines(content.splitlines())
        except Exception as e:
            # Extraction must never abort the caller's workflow
            logger.warning("Error parsing transcript: %s", e)
            return None
