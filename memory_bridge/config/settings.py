"""Application settings and configuration schema."""

import logging
import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from memory_bridge.memory.extractor import DEFAULT_VERBS
from memory_bridge.persist.paths import default_db_path


logger = logging.getLogger(__name__)


class StoreCfg(BaseModel):
    """Configuration for the session store."""
    db_path: str = Field(default_factory=lambda: str(default_db_path()))
    max_sessions: int = Field(5, ge=1, description="Rolling window per project")


class ExtractCfg(BaseModel):
    """Configuration for transcript extraction."""
    max_request_chars: int = Field(500, ge=0, le=500)
    max_decisions: int = Field(10, ge=0, le=10)
    assistant_window: int = Field(5, ge=1)
    decision_verbs: List[str] = Field(default_factory=lambda: list(DEFAULT_VERBS))


class FormatCfg(BaseModel):
    """Configuration for rendering recalled sessions."""
    context_chars: int = 200
    decisions_per_session: int = 5


class Settings(BaseModel):
    """Main application settings."""
    store: StoreCfg = Field(default_factory=StoreCfg)
    extract: ExtractCfg = Field(default_factory=ExtractCfg)
    format: FormatCfg = Field(default_factory=FormatCfg)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings with overrides from environment variables.
        
        Recognized variables:
        - MEMORY_BRIDGE_DB: database file path
        - MEMORY_BRIDGE_MAX_SESSIONS: rolling window size
        - MEMORY_BRIDGE_LOG_LEVEL: diagnostic log level
        
        Args:
            environ: Mapping to read from (defaults to os.environ)
        
        Returns:
            Settings instance; an invalid value falls back to its own default
        """
        if environ is None:
            environ = os.environ
        
        store = {}
        if environ.get("MEMORY_BRIDGE_DB"):
            store["db_path"] = environ["MEMORY_BRIDGE_DB"]
        
        raw_window = environ.get("MEMORY_BRIDGE_MAX_SESSIONS")
        if raw_window:
            try:
                store["max_sessions"] = StoreCfg(max_sessions=raw_window).max_sessions
            except ValidationError:
                # Skip only the bad key so other overrides still apply
                logger.warning(
                    "Ignoring invalid MEMORY_BRIDGE_MAX_SESSIONS=%r, using %d",
                    raw_window, StoreCfg.model_fields["max_sessions"].default
                )
        
        data = {"store": StoreCfg(**store)}
        if environ.get("MEMORY_BRIDGE_LOG_LEVEL"):
            data["log_level"] = environ["MEMORY_BRIDGE_LOG_LEVEL"].upper()
        
        return cls(**data)
