"""
Result type for best-effort memory workflows.

Hooks never fail the host: every workflow returns either ``Ok`` with its
data or ``Degraded`` with a human-readable reason.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    """Workflow completed."""
    
    data: Any = None
    
    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded:
    """Workflow skipped or failed; proceed without memory."""
    
    reason: str
    # True when the reason is an actual failure rather than absent input
    failure: bool = True
    
    @property
    def degraded(self) -> bool:
        return True


Outcome = Union[Ok, Degraded]
