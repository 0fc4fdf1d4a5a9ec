"""
Session memory subsystem.

Provides:
- Transcript and summary data models
- Decision extraction from transcripts
- Error taxonomy and best-effort result type
"""

from .schemas import Message, SessionSummary, HookInput, MAX_DECISIONS, MAX_REQUEST_CHARS
from .errors import MemoryBridgeError, StorageUnavailable, StoreOperationFailed
from .outcome import Ok, Degraded, Outcome
from .extractor import DecisionMatcher, TranscriptExtractor, parse_transcript_lines

__all__ = [
    "Message",
    "SessionSummary",
    "HookInput",
    "MAX_DECISIONS",
    "MAX_REQUEST_CHARS",
    "MemoryBridgeError",
    "StorageUnavailable",
    "StoreOperationFailed",
    "Ok",
    "Degraded",
    "Outcome",
    "DecisionMatcher",
    "TranscriptExtractor",
    "parse_transcript_lines",
]
