"""
Path management for the memory database.

The database lives in a fixed, user-scoped configuration directory shared
by every project on the machine.
"""

from pathlib import Path
from typing import Optional


DB_FILENAME = "memory-bridge.db"


def config_dir(home: Optional[Path] = None) -> Path:
    """
    Directory holding the memory database.
    
    Args:
        home: Home directory (defaults to the current user's)
    
    Returns:
        Path to ~/.claude
    """
    if home is None:
        home = Path.home()
    return Path(home) / ".claude"


def default_db_path(home: Optional[Path] = None) -> Path:
    """
    Default location of the SQLite database.
    
    Example:
        >>> default_db_path(Path("/home/ada"))
        PosixPath('/home/ada/.claude/memory-bridge.db')
    """
    return config_dir(home) / DB_FILENAME


def ensure_parent(db_path: Path) -> None:
    """Create the database's parent directory if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
