"""
Process-wide device endpoint (host/port the EO1 listens on)
"""

import ipaddress
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_PORT = 12345
DEFAULT_TIMEOUT_SECONDS = 5.0
# Empirical: the EO1 needs a moment to read the buffer before the socket goes away
DEFAULT_GRACE_DELAY = 0.1


def validate_ipv4(host: str) -> str:
    """Return host if it is a dotted-quad IPv4 address, else raise ValueError"""
    if not isinstance(host, str):
        raise ValueError("IP address must be a string")
    host = host.strip()
    try:
        ipaddress.IPv4Address(host)
    except ipaddress.AddressValueError as e:
        raise ValueError(f"Invalid IP address format: {host}") from e
    return host


class DeviceEndpoint:
    """Where commands go. Only the host is expected to change at runtime."""

    def __init__(self, host: str, port: int = DEFAULT_DEVICE_PORT,
                 timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
                 grace_delay_seconds: float = DEFAULT_GRACE_DELAY):
        self._host = validate_ipv4(host)
        self.port = port
        self.timeout_seconds = timeout_seconds
        self.grace_delay_seconds = grace_delay_seconds

    @property
    def host(self) -> str:
        return self._host

    def set_host(self, new_host: str) -> None:
        """Point future commands and scans at a new device IP"""
        new_host = validate_ipv4(new_host)
        if new_host != self._host:
            logger.info(f"Device host changed: {self._host} -> {new_host}")
        self._host = new_host

    def snapshot(self) -> Tuple[str, int]:
        """Current (host, port); operations read this once when they start"""
        return self._host, self.port

    def __repr__(self) -> str:
        return f"DeviceEndpoint({self._host}:{self.port})"
