"""
Memory system data models.

Defines the transcript Message, the persisted SessionSummary, and the
payload the host delivers to the hooks.
"""

import os
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


MAX_REQUEST_CHARS = 500
MAX_DECISIONS = 10

# Type aliases
Role = Literal["user", "assistant", "other"]


class Message(BaseModel):
    """A single role-tagged transcript message."""
    
    model_config = ConfigDict(frozen=True, extra="ignore")
    
    role: Role = Field("other", description="user, assistant, or other")
    content: Any = Field(None, description="Plain text or structured content blocks")
    
    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> str:
        if value in ("user", "assistant"):
            return value
        return "other"
    
    @property
    def text(self) -> str:
        """Content as plain text; structured content yields an empty string."""
        return self.content if isinstance(self.content, str) else ""
    
    @classmethod
    def from_record(cls, record: dict) -> "Message":
        """
        Build a message from one parsed transcript record.
        
        Records either carry role/content at the top level or wrap them in
        a ``message`` envelope, e.g. ``{"type": "user", "message": {...}}``.
        """
        if "role" not in record and isinstance(record.get("message"), dict):
            record = record["message"]
        return cls(**record)


class SessionSummary(BaseModel):
    """
    Distilled digest of one work session.
    
    Persisted summaries are never updated; they are inserted once and
    removed only when the project's rolling window evicts them.
    """
    
    session_id: str = Field("", description="Opaque session identifier")
    project_path: str = Field("", description="Partition key (absolute project path)")
    initial_request: str = Field("", description="First user request, truncated")
    decisions: List[str] = Field(default_factory=list, description="Decision lines in transcript order")
    created_at: Optional[float] = Field(None, description="Unix timestamp assigned on insert")
    
    # Extraction diagnostics (transient)
    message_count: int = Field(0, description="Messages parsed from the transcript (not persisted)")
    skipped_lines: int = Field(0, description="Unparseable transcript lines (not persisted)")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "4f1c2a",
                "project_path": "/home/ada/projects/api",
                "initial_request": "Fix the login redirect loop",
                "decisions": ["- Fixed login bug", "* Added retry logic"],
                "created_at": 1696723200.0,
            }
        }
    )
    
    @field_validator("initial_request", mode="before")
    @classmethod
    def _truncate_request(cls, value: Any) -> str:
        if not isinstance(value, str):
            return ""
        return value[:MAX_REQUEST_CHARS]
    
    @field_validator("decisions")
    @classmethod
    def _cap_decisions(cls, value: List[str]) -> List[str]:
        return value[:MAX_DECISIONS]
    
    def to_storage_dict(self) -> dict:
        """Convert to dict for storage (exclude transient diagnostics)."""
        return self.model_dump(exclude={"message_count", "skipped_lines"})


class HookInput(BaseModel):
    """Payload the host writes to a hook's stdin."""
    
    model_config = ConfigDict(extra="ignore")
    
    session_id: Optional[str] = None
    transcript_path: Optional[str] = None
    cwd: Optional[str] = None
    hook_event_name: Optional[str] = None

    @field_validator("session_id", mode="before")
    @classmethod
    def _coerce_session_id(cls, value: Any) -> Optional[str]:
        # Some hosts send numeric ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def resolve_project_path(self) -> str:
        """Absolute project path, falling back to the process working directory."""
        return os.path.abspath(self.cwd or os.getcwd())
    
    def resolve_session_id(self) -> str:
        return self.session_id or "unknown"
