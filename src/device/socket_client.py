"""
EO1 socket client

Sends one command per TCP connection to the EO1 on port 12345.

The EO1 app becomes unstable when a connection is opened and left without a
command, so this client never connects without sending one and never reuses a
connection. Health checks must not touch the command port; the only bare
connect/close is the discovery probe in discovery.network_discovery.
"""

import asyncio
import logging
import time
from typing import Dict, Any

from .commands import (
    Command, DisplayImage, DisplayVideo, Resume, SetTag, SetBrightness, SetOptions,
    encode_command
)
from .endpoint import DeviceEndpoint
from .exceptions import DeviceConnectError, DeviceTimeoutError
from .models import CommandOutcome

logger = logging.getLogger(__name__)


class DeviceSocket:
    """Fire-and-forget command delivery to a single EO1 device"""

    def __init__(self, endpoint: DeviceEndpoint):
        self.endpoint = endpoint

    async def send_command(self, command: Command) -> CommandOutcome:
        """
        Encode and deliver one command.
        Raises DeviceConnectError or DeviceTimeoutError; never retries.
        """
        wire = encode_command(command)
        host, port = self.endpoint.snapshot()
        timeout = self.endpoint.timeout_seconds
        start_time = time.perf_counter()

        try:
            await asyncio.wait_for(
                self._deliver(host, port, wire, self.endpoint.grace_delay_seconds),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Timeout sending '{wire}' to {host}:{port} after {timeout}s")
            raise DeviceTimeoutError("Connection timeout", wire) from None
        except OSError as e:
            logger.warning(f"Failed sending '{wire}' to {host}:{port}: {e}")
            raise DeviceConnectError(f"Connection failed: {e}", wire) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"Sent '{wire}' to {host}:{port} ({elapsed_ms:.0f}ms)")
        return CommandOutcome(succeeded=True, command=wire)

    async def _deliver(self, host: str, port: int, wire: str, grace_delay: float):
        reader, writer = await asyncio.open_connection(host, port)
        try:
            writer.write(f"{wire}\n".encode("utf-8"))
            await writer.drain()

            # Give the EO1 time to read the buffer before tearing down
            await asyncio.sleep(grace_delay)

            await self._shutdown(reader, writer)
        finally:
            if not writer.is_closing():
                writer.close()

    async def _shutdown(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Half-close, wait for the device to close its side, then close"""
        try:
            if writer.can_write_eof():
                writer.write_eof()
            while await reader.read(1024):
                pass
        except OSError as e:
            # Payload was already flushed; a reset or ENOTCONN here means the peer is gone
            logger.debug(f"Connection reset during close: {e}")

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Connection reset while waiting for close: {e}")

    # ================== COMMAND HELPERS ==================

    async def display_image(self, photo_id: str) -> CommandOutcome:
        return await self.send_command(DisplayImage(photo_id))

    async def display_video(self, photo_id: str) -> CommandOutcome:
        return await self.send_command(DisplayVideo(photo_id))

    async def resume(self) -> CommandOutcome:
        return await self.send_command(Resume())

    async def set_tag(self, tag: str) -> CommandOutcome:
        return await self.send_command(SetTag(tag))

    async def set_brightness(self, level: float) -> CommandOutcome:
        return await self.send_command(SetBrightness(level))

    async def set_options(self, brightness: float, interval: int,
                          start_hour: int, end_hour: int) -> CommandOutcome:
        return await self.send_command(SetOptions(brightness, interval, start_hour, end_hour))

    def check_connection(self) -> Dict[str, Any]:
        """
        Report the configured endpoint.
        Does not open a socket: connecting without a command can crash the EO1 app.
        """
        host, port = self.endpoint.snapshot()
        return {"host": host, "port": port}
