"""Tests for DeviceSocket connection lifecycle against localhost stub devices.

Covers:
- success when the device reads and closes, or closes straight away
- ConnectFailed when nothing listens
- Timeout when the device accepts but never closes
- grace delay between write and close
- host changes during an in-flight command
"""

import asyncio
import socket
from unittest.mock import patch

import pytest

from device import (
    DeviceEndpoint, DeviceSocket, DeviceConnectError, DeviceTimeoutError,
    ErrorKind, Resume, SetBrightness
)
from stub_device import running_stub


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _endpoint(port: int, timeout: float = 2.0, grace: float = 0.05) -> DeviceEndpoint:
    return DeviceEndpoint("127.0.0.1", port=port, timeout_seconds=timeout, grace_delay_seconds=grace)


@pytest.mark.asyncio
async def test_send_command_success_when_device_reads_and_closes() -> None:
    async with running_stub("read") as stub:
        client = DeviceSocket(_endpoint(stub.port))

        outcome = await client.send_command(Resume())

        assert outcome.succeeded is True
        assert outcome.command == "resume,"
        assert outcome.error_kind is None
    assert bytes(stub.received) == b"resume,\n"
    assert stub.connections == 1


@pytest.mark.asyncio
async def test_send_command_success_when_device_closes_immediately() -> None:
    async with running_stub("close") as stub:
        client = DeviceSocket(_endpoint(stub.port))

        outcome = await client.send_command(SetBrightness(0.5))

        assert outcome.succeeded is True
        assert outcome.command == "brightness,0.5"


@pytest.mark.asyncio
async def test_send_command_connect_failed_when_nothing_listens() -> None:
    client = DeviceSocket(_endpoint(_free_port()))

    with pytest.raises(DeviceConnectError) as exc_info:
        await client.send_command(Resume())

    assert exc_info.value.kind is ErrorKind.CONNECT_FAILED
    assert exc_info.value.command == "resume,"
    assert str(exc_info.value).startswith("Connection failed")
    outcome = exc_info.value.outcome
    assert outcome.succeeded is False
    assert outcome.error_kind is ErrorKind.CONNECT_FAILED


@pytest.mark.asyncio
async def test_send_command_times_out_when_device_never_closes() -> None:
    async with running_stub("hang") as stub:
        client = DeviceSocket(_endpoint(stub.port, timeout=0.3))
        loop = asyncio.get_running_loop()
        started = loop.time()

        with pytest.raises(DeviceTimeoutError) as exc_info:
            await client.send_command(Resume())

        elapsed = loop.time() - started
        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert exc_info.value.outcome.error_kind is ErrorKind.TIMEOUT
        assert str(exc_info.value) == "Connection timeout"
        assert 0.25 <= elapsed < 2.0


@pytest.mark.asyncio
async def test_grace_delay_elapses_before_close() -> None:
    # Device is slower to read than the write, but faster than the grace delay
    async with running_stub("read", read_delay=0.05) as stub:
        client = DeviceSocket(_endpoint(stub.port, grace=0.2))

        await client.send_command(Resume())

    assert bytes(stub.received) == b"resume,\n"
    assert stub.eof_at - stub.accepted_at >= 0.15


@pytest.mark.asyncio
async def test_one_connection_per_command() -> None:
    async with running_stub("read") as stub:
        client = DeviceSocket(_endpoint(stub.port))

        await client.resume()
        await client.set_brightness(-1)

    assert stub.connections == 2
    assert bytes(stub.received) == b"resume,\nbrightness,-1\n"


@pytest.mark.asyncio
async def test_set_host_does_not_redirect_in_flight_command() -> None:
    async with running_stub("read", read_delay=0.05) as stub:
        endpoint = _endpoint(stub.port, grace=0.2)
        client = DeviceSocket(endpoint)

        task = asyncio.create_task(client.send_command(Resume()))
        await asyncio.sleep(0.1)
        endpoint.set_host("10.255.255.1")
        outcome = await task

    assert outcome.succeeded is True
    assert bytes(stub.received) == b"resume,\n"

    # The next command resolves the new host
    with patch("asyncio.open_connection", side_effect=ConnectionRefusedError("refused")) as mock_open:
        with pytest.raises(DeviceConnectError):
            await client.send_command(Resume())
    mock_open.assert_called_once_with("10.255.255.1", endpoint.port)


def test_check_connection_does_not_open_socket() -> None:
    client = DeviceSocket(DeviceEndpoint("192.168.1.43"))

    with patch("asyncio.open_connection") as mock_open:
        info = client.check_connection()

    assert info == {"host": "192.168.1.43", "port": 12345}
    mock_open.assert_not_called()


def test_set_host_rejects_invalid_address() -> None:
    endpoint = DeviceEndpoint("192.168.1.43")

    with pytest.raises(ValueError):
        endpoint.set_host("not-an-ip")

    assert endpoint.host == "192.168.1.43"
    endpoint.set_host(" 192.168.1.50 ")
    assert endpoint.snapshot() == ("192.168.1.50", 12345)
