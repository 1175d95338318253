"""Encoding of simulation orders for the server's order queue."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable

from .conversion import to_s16, to_u8, to_u16
from .geometry import IVec2


@dataclass(frozen=True)
class SimulationOrder:
    """An order from one player to move some of its units."""

    player_id: int
    unit_ids: tuple[int, ...]
    target: IVec2


_HEADER = "<BHhh"


def _encode(order: SimulationOrder) -> bytes:
    header = struct.pack(
        _HEADER,
        to_u8(order.player_id),
        to_u16(len(order.unit_ids)),
        to_s16(order.target.x),
        to_s16(order.target.y),
    )
    ids = struct.pack(
        f"<{len(order.unit_ids)}H", *(to_u16(i) for i in order.unit_ids)
    )
    return header + ids


def _unpack(fmt: str, data: bytes, offset: int) -> tuple[tuple, int]:
    try:
        values = struct.unpack_from(fmt, data, offset)
    except struct.error as exc:
        raise ValueError("order data is truncated") from exc
    return values, offset + struct.calcsize(fmt)


def _decode(data: bytes, offset: int) -> tuple[SimulationOrder, int]:
    (player_id, count, x, y), offset = _unpack(_HEADER, data, offset)
    unit_ids, offset = _unpack(f"<{count}H", data, offset)
    return SimulationOrder(player_id, tuple(unit_ids), IVec2(x, y)), offset


def serialize_order(order: SimulationOrder) -> bytes:
    """Encode one order."""
    return _encode(order)


def parse_order(data: bytes) -> SimulationOrder:
    """Decode one order."""
    order, _ = _decode(bytes(data), 0)
    return order


def serialize_order_list(orders: Iterable[SimulationOrder]) -> bytes:
    """Encode a counted list of orders."""
    orders = list(orders)
    return struct.pack("<H", to_u16(len(orders))) + b"".join(
        _encode(order) for order in orders
    )


def parse_order_list(data: bytes) -> list[SimulationOrder]:
    """Decode a counted list of orders."""
    data = bytes(data)
    (count,), offset = _unpack("<H", data, 0)
    orders = []
    for _ in range(count):
        order, offset = _decode(data, offset)
        orders.append(order)
    return orders