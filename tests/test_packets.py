import socket

import pytest

from skirmishd.packets import (
    PACKET_HEADER_SIZE,
    extract_packet,
    frame_packet,
    receive,
    send_packet,
)


def test_frame_is_little_endian_length_prefix():
    assert frame_packet(b"abc") == b"\x03\x00abc"


def test_extract_round_trip():
    message = bytes(range(200))
    assert extract_packet(frame_packet(message)) == message


def test_extract_ignores_trailing_data():
    data = frame_packet(b"first") + frame_packet(b"second")
    assert extract_packet(data) == b"first"


def test_extract_incomplete_returns_none():
    data = frame_packet(b"hello")
    assert extract_packet(data[:-1]) is None


def test_extract_header_only_returns_none():
    assert extract_packet(frame_packet(b"x")[:PACKET_HEADER_SIZE]) is None


def test_frame_rejects_oversized():
    with pytest.raises(ValueError):
        frame_packet(bytes(0x10000))


def test_send_and_receive_over_socketpair():
    left, right = socket.socketpair()
    with left, right:
        send_packet(left, b"order")
        data = receive(right, 64)
    assert extract_packet(data) == b"order"


def test_receive_rejects_zero_size():
    left, right = socket.socketpair()
    with left, right, pytest.raises(ValueError):
        receive(right, 0)