"""Commands passed from the game to the network layer."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

NET_COMMAND_MAX_LENGTH = 512

_TYPE = "<i"
_SIZE = "<Q"


class CommandType(IntEnum):
    SHUTDOWN = 0
    BROADCAST = 1
    SEND = 2


@dataclass(frozen=True)
class BroadcastCommand:
    client_ids: tuple[int, ...]
    message: bytes


@dataclass(frozen=True)
class SendCommand:
    client_id: int
    message: bytes


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._offset = 0

    def read(self, fmt: str) -> tuple:
        try:
            values = struct.unpack_from(fmt, self._data, self._offset)
        except struct.error as exc:
            raise ValueError("command is truncated") from exc
        self._offset += struct.calcsize(fmt)
        return values

    def take(self, length: int) -> bytes:
        chunk = self._data[self._offset : self._offset + length]
        if len(chunk) != length:
            raise ValueError("command is truncated")
        self._offset += length
        return chunk

    def expect_type(self, expected: CommandType) -> None:
        (kind,) = self.read(_TYPE)
        if kind != expected:
            raise ValueError(f"expected {expected.name} command, got type {kind}")


def serialize_shutdown() -> bytes:
    """Encode a shutdown command."""
    return struct.pack(_TYPE, CommandType.SHUTDOWN)


def serialize_broadcast(client_ids: Sequence[int], message: bytes) -> bytes:
    """Encode a command to send ``message`` to every listed client."""
    client_ids = list(client_ids)
    return (
        struct.pack("<iQQ", CommandType.BROADCAST, len(client_ids), len(message))
        + struct.pack(f"<{len(client_ids)}Q", *client_ids)
        + bytes(message)
    )


def serialize_send(client_id: int, message: bytes) -> bytes:
    """Encode a command to send ``message`` to one client."""
    return struct.pack("<iQQ", CommandType.SEND, client_id, len(message)) + bytes(
        message
    )


def command_type(data: bytes) -> CommandType:
    """Return the type of an encoded command."""
    if len(data) < struct.calcsize(_TYPE):
        raise ValueError("command is too short to hold a type")
    (kind,) = struct.unpack_from(_TYPE, data)
    try:
        return CommandType(kind)
    except ValueError:
        raise ValueError(f"unknown command type {kind}") from None


def parse_broadcast(data: bytes) -> BroadcastCommand:
    """Decode a broadcast command."""
    reader = _Reader(data)
    reader.expect_type(CommandType.BROADCAST)
    count, length = reader.read("<QQ")
    client_ids = reader.read(f"<{count}Q")
    return BroadcastCommand(tuple(client_ids), reader.take(length))


def parse_send(data: bytes) -> SendCommand:
    """Decode a send command."""
    reader = _Reader(data)
    reader.expect_type(CommandType.SEND)
    (client_id,) = reader.read(_SIZE)
    (length,) = reader.read(_SIZE)
    return SendCommand(client_id, reader.take(length))