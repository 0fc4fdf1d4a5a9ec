"""
Persistence layer for session memory.

Provides:
- User-scoped database path management
- SQLite-backed rolling session store
"""

from .paths import config_dir, default_db_path, ensure_parent
from .sqlite_store import SessionStore, query_recent

__all__ = [
    "config_dir",
    "default_db_path",
    "ensure_parent",
    "SessionStore",
    "query_recent",
]
