"""
Discovery data structures and models
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field


@dataclass
class ScanResult:
    """Results from one subnet scan"""
    subnet_prefix: str  # first three octets, e.g. "192.168.1"
    responding_hosts: List[str] = field(default_factory=list)  # completion order, not address order
    duration_seconds: float = 0.0
    hosts_probed: int = 0

    @property
    def found(self) -> int:
        return len(self.responding_hosts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subnet": self.subnet_prefix,
            "devices": list(self.responding_hosts),
            "found": self.found
        }


class SubnetDetectionError(Exception):
    """No subnet given and none could be detected from local interfaces"""
