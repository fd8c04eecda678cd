"""
Local subnet detection from network interfaces
"""

import socket
import ipaddress
import logging
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


def detect_subnet() -> Optional[str]:
    """
    Return the /24 prefix (e.g. "192.168.1") of the first non-loopback IPv4
    interface, or None if the machine has none.
    """
    try:
        interfaces = psutil.net_if_addrs()
    except (OSError, RuntimeError) as e:
        logger.warning(f"Could not enumerate network interfaces: {e}")
        return None

    for name, addresses in interfaces.items():
        for addr in addresses:
            if addr.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.IPv4Address(addr.address)
            except ipaddress.AddressValueError:
                continue
            if ip.is_loopback:
                continue

            prefix = ".".join(str(ip).split(".")[:3])
            logger.debug(f"Detected subnet {prefix} on interface {name}")
            return prefix

    logger.info("No non-loopback IPv4 interface found")
    return None
