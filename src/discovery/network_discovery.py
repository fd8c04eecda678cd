"""
Network discovery for EO1 devices

Connect-only probe of every host in a /24 for the device command port.
This is the one place a connection is opened without a command: each probe
closes as soon as it connects.
"""

import asyncio
import logging
import re
import time
from typing import List, Optional

from device.endpoint import DeviceEndpoint
from .models import ScanResult, SubnetDetectionError
from .subnet import detect_subnet

logger = logging.getLogger(__name__)

_PREFIX_PATTERN = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")

DEFAULT_PROBE_TIMEOUT = 0.5
HOSTS_PER_SUBNET = 254


def validate_subnet_prefix(prefix: str) -> str:
    """Return a normalised three-octet prefix or raise ValueError"""
    if not isinstance(prefix, str):
        raise ValueError("Subnet must be a string like '192.168.1'")
    prefix = prefix.strip().rstrip(".")
    match = _PREFIX_PATTERN.match(prefix)
    if not match or any(int(octet) > 255 for octet in match.groups()):
        raise ValueError(f"Invalid subnet '{prefix}' - expected three octets like '192.168.1'")
    return ".".join(str(int(octet)) for octet in match.groups())


def generate_host_addresses(prefix: str) -> List[str]:
    """Candidate host addresses .1-.254 for a /24 prefix"""
    return [f"{prefix}.{i}" for i in range(1, HOSTS_PER_SUBNET + 1)]


class NetworkDiscovery:
    """Finds hosts with the EO1 command port open"""

    def __init__(self, endpoint: DeviceEndpoint, probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
                 max_concurrent_probes: int = HOSTS_PER_SUBNET):
        self.endpoint = endpoint
        self.probe_timeout = probe_timeout
        self.max_concurrent_probes = max(1, max_concurrent_probes)

    async def scan_network(self, subnet_prefix: Optional[str] = None,
                           timeout: Optional[float] = None) -> ScanResult:
        """
        Probe all 254 hosts of the subnet concurrently.
        Falls back to the detected local subnet when none is given.
        Returns an empty result, not an error, when nothing answers.
        """
        if subnet_prefix is None:
            subnet_prefix = detect_subnet()
            if subnet_prefix is None:
                raise SubnetDetectionError("Could not detect network subnet")
        prefix = validate_subnet_prefix(subnet_prefix)
        probe_timeout = self.probe_timeout if timeout is None else timeout
        port = self.endpoint.port

        ip_list = generate_host_addresses(prefix)
        found: List[str] = []
        semaphore = asyncio.Semaphore(self.max_concurrent_probes)

        async def probe_single_ip(ip: str):
            async with semaphore:
                if await self._probe(ip, port, probe_timeout):
                    found.append(ip)
                    logger.info(f"Found open port {port} on {ip}")

        logger.info(f"Scanning {prefix}.* for EO1 devices on port {port} (timeout {probe_timeout}s)")
        start_time = time.time()

        tasks = [probe_single_ip(ip) for ip in ip_list]
        await asyncio.gather(*tasks)

        duration = time.time() - start_time
        logger.info(f"Scan of {prefix}.* complete: {len(found)} device(s) in {duration:.1f}s")
        return ScanResult(
            subnet_prefix=prefix,
            responding_hosts=found,
            duration_seconds=duration,
            hosts_probed=len(ip_list)
        )

    async def _probe(self, ip: str, port: int, timeout: float) -> bool:
        """Connect and immediately close; any failure means not found"""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(ip, port),
                timeout=timeout
            )
        except (asyncio.TimeoutError, OSError) as e:
            logger.debug(f"No response from {ip}:{port}: {e!r}")
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error closing probe to {ip}:{port}: {e}")
        return True
