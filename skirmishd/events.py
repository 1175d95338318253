"""Events passed from the network layer to the game."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from .conversion import to_u8

NET_EVENT_MAX_LENGTH = 512

_ID_EVENT_LENGTH = 2


class EventType(IntEnum):
    CONNECT = 0
    DISCONNECT = 1
    MESSAGE = 2


@dataclass(frozen=True)
class ConnectEvent:
    client_id: int


@dataclass(frozen=True)
class DisconnectEvent:
    client_id: int


@dataclass(frozen=True)
class MessageEvent:
    client_id: int
    message: bytes


def _client_id(client_id: int) -> int:
    if not 0 <= client_id < 256:
        raise ValueError(f"client id {client_id} does not fit in one byte")
    return client_id


def serialize_connect(client_id: int) -> bytes:
    """Encode a client connection event."""
    return struct.pack("<BB", EventType.CONNECT, _client_id(client_id))


def serialize_disconnect(client_id: int) -> bytes:
    """Encode a client disconnection event."""
    return struct.pack("<BB", EventType.DISCONNECT, _client_id(client_id))


def serialize_message(client_id: int, message: bytes) -> bytes:
    """Encode a message received from a client."""
    return struct.pack(
        "<BBQ", to_u8(EventType.MESSAGE), _client_id(client_id), len(message)
    ) + bytes(message)


def event_type(data: bytes) -> EventType:
    """Return the type of an encoded event."""
    if not data:
        raise ValueError("empty event")
    try:
        return EventType(data[0])
    except ValueError:
        raise ValueError(f"unknown event type {data[0]}") from None


def _parse_id_event(data: bytes, expected: EventType) -> int:
    if len(data) != _ID_EVENT_LENGTH:
        raise ValueError(f"{expected.name} event must be {_ID_EVENT_LENGTH} bytes")
    kind, client_id = struct.unpack("<BB", data)
    if kind != expected:
        raise ValueError(f"expected {expected.name} event, got type {kind}")
    return client_id


def parse_connect(data: bytes) -> ConnectEvent:
    """Decode a connection event."""
    return ConnectEvent(_parse_id_event(data, EventType.CONNECT))


def parse_disconnect(data: bytes) -> DisconnectEvent:
    """Decode a disconnection event."""
    return DisconnectEvent(_parse_id_event(data, EventType.DISCONNECT))


def parse_message(data: bytes) -> MessageEvent:
    """Decode a message event."""
    data = bytes(data)
    try:
        kind, client_id, length = struct.unpack_from("<BBQ", data)
    except struct.error as exc:
        raise ValueError("message event is truncated") from exc
    if kind != EventType.MESSAGE:
        raise ValueError(f"expected MESSAGE event, got type {kind}")
    start = struct.calcsize("<BBQ")
    message = data[start : start + length]
    if len(message) != length:
        raise ValueError("message event is truncated")
    return MessageEvent(client_id, message)