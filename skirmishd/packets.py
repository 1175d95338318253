"""Length-prefixed packet framing on stream sockets."""

from __future__ import annotations

import socket
import struct

PACKET_HEADER_SIZE = 2
PACKET_MAX_LENGTH = 0xFFFF


def frame_packet(message: bytes) -> bytes:
    """Prefix ``message`` with its 16-bit length."""
    if len(message) > PACKET_MAX_LENGTH:
        raise ValueError(f"packet of {len(message)} bytes is too long")
    return struct.pack("<H", len(message)) + bytes(message)


def extract_packet(data: bytes) -> bytes | None:
    """Return the first complete packet's message in ``data``, or None."""
    if len(data) <= PACKET_HEADER_SIZE:
        return None
    (length,) = struct.unpack_from("<H", data)
    if len(data) < length + PACKET_HEADER_SIZE:
        return None
    return bytes(data[PACKET_HEADER_SIZE : PACKET_HEADER_SIZE + length])


def send_packet(sock: socket.socket, message: bytes) -> None:
    """Send ``message`` as one framed packet."""
    sock.sendall(frame_packet(message))


def receive(sock: socket.socket, size: int) -> bytes:
    """Receive up to ``size`` bytes; empty bytes mean the peer closed."""
    if size <= 0:
        raise ValueError("receive size must be positive")
    return sock.recv(size)