"""Client/server game messages and their wire format."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

from .conversion import to_s16, to_u8, to_u16
from .geometry import IVec2

NET_MESSAGE_MAX_LENGTH = 1024


class MessageType(IntEnum):
    START = 123
    ORDER_LIST = 124
    ORDER = 125
    REPLY = 126


MESSAGE_TYPE_COUNT = 127


@dataclass(frozen=True)
class StartMessage:
    player_count: int
    player_index: int


@dataclass(frozen=True)
class NetOrder:
    player_id: int
    unit_ids: tuple[int, ...]
    target: IVec2


@dataclass(frozen=True)
class OrderMessage:
    unit_ids: tuple[int, ...]
    target: IVec2


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._offset = 0

    def read(self, fmt: str) -> tuple:
        try:
            values = struct.unpack_from(fmt, self._data, self._offset)
        except struct.error as exc:
            raise ValueError("message is truncated") from exc
        self._offset += struct.calcsize(fmt)
        return values

    def expect_type(self, expected: MessageType) -> None:
        (value,) = self.read("<B")
        if value != expected:
            raise ValueError(f"expected message type {expected.name}, got {value}")


def _pack_ids(unit_ids: Sequence[int]) -> bytes:
    return struct.pack(f"<{len(unit_ids)}H", *(to_u16(i) for i in unit_ids))


def serialize_start(player_count: int, player_index: int) -> bytes:
    """Encode the message that tells a client the game has started."""
    return struct.pack(
        "<BBB", MessageType.START, to_u8(player_count), to_u8(player_index)
    )


def serialize_reply() -> bytes:
    """Encode a reply message."""
    return struct.pack("<B", MessageType.REPLY)


def serialize_order_list(orders: Iterable[NetOrder]) -> bytes:
    """Encode a list of orders broadcast for one simulation tick."""
    orders = list(orders)
    parts = [struct.pack("<BH", MessageType.ORDER_LIST, to_u16(len(orders)))]
    for order in orders:
        parts.append(
            struct.pack(
                "<BHhh",
                to_u8(order.player_id),
                to_u16(len(order.unit_ids)),
                to_s16(order.target.x),
                to_s16(order.target.y),
            )
        )
        parts.append(_pack_ids(order.unit_ids))
    return b"".join(parts)


def serialize_order(unit_ids: Sequence[int], target: IVec2) -> bytes:
    """Encode a client's order to move ``unit_ids`` towards ``target``."""
    unit_ids = list(unit_ids)
    data = struct.pack(
        "<BHhh",
        MessageType.ORDER,
        to_u16(len(unit_ids)),
        to_s16(target.x),
        to_s16(target.y),
    ) + _pack_ids(unit_ids)
    if len(data) > NET_MESSAGE_MAX_LENGTH:
        raise ValueError(
            f"order message of {len(data)} bytes exceeds {NET_MESSAGE_MAX_LENGTH}"
        )
    return data


def message_type(data: bytes) -> MessageType:
    """Return the type of an encoded message."""
    if not data:
        raise ValueError("empty message")
    try:
        return MessageType(data[0])
    except ValueError:
        raise ValueError(f"unknown message type {data[0]}") from None


def is_valid_type(value: int) -> bool:
    """Return whether ``value`` is below the message type count."""
    return 0 <= value < MESSAGE_TYPE_COUNT


def parse_order(data: bytes) -> OrderMessage:
    """Decode an order message."""
    reader = _Reader(data)
    reader.expect_type(MessageType.ORDER)
    count, x, y = reader.read("<Hhh")
    unit_ids = reader.read(f"<{count}H")
    return OrderMessage(unit_ids=tuple(unit_ids), target=IVec2(x, y))


def parse_start(data: bytes) -> StartMessage:
    """Decode a start message."""
    reader = _Reader(data)
    reader.expect_type(MessageType.START)
    player_count, player_index = reader.read("<BB")
    return StartMessage(player_count=player_count, player_index=player_index)


def parse_order_list(data: bytes) -> list[NetOrder]:
    """Decode an order-list message."""
    reader = _Reader(data)
    reader.expect_type(MessageType.ORDER_LIST)
    (count,) = reader.read("<H")
    orders = []
    for _ in range(count):
        player_id, unit_count, x, y = reader.read("<BHhh")
        unit_ids = reader.read(f"<{unit_count}H")
        orders.append(NetOrder(player_id, tuple(unit_ids), IVec2(x, y)))
    return orders