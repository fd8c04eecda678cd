"""
Device command outcomes and error kinds
"""

from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass


class ErrorKind(str, Enum):
    """Why a command could not be delivered"""
    CONNECT_FAILED = "ConnectFailed"
    TIMEOUT = "Timeout"


@dataclass(frozen=True)
class CommandOutcome:
    """Result of a single send to the device"""
    succeeded: bool
    command: str  # encoded wire string, kept for logging
    error_kind: Optional[ErrorKind] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "command": self.command,
            "error_kind": self.error_kind.value if self.error_kind else None
        }
