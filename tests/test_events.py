import struct

import pytest

from skirmishd.events import (
    ConnectEvent,
    DisconnectEvent,
    EventType,
    MessageEvent,
    event_type,
    parse_connect,
    parse_disconnect,
    parse_message,
    serialize_connect,
    serialize_disconnect,
    serialize_message,
)


def test_connect_wire_bytes():
    assert serialize_connect(7) == bytes([EventType.CONNECT, 7])


def test_connect_round_trip():
    assert parse_connect(serialize_connect(12)) == ConnectEvent(12)


def test_disconnect_round_trip():
    assert parse_disconnect(serialize_disconnect(255)) == DisconnectEvent(255)


def test_message_round_trip():
    event = parse_message(serialize_message(10, b"\x7dpayload"))
    assert event == MessageEvent(10, b"\x7dpayload")


def test_message_length_field():
    data = serialize_message(3, b"abcd")
    assert struct.unpack_from("<BBQ", data) == (EventType.MESSAGE, 3, 4)
    assert data.endswith(b"abcd")


@pytest.mark.parametrize(
    "data, expected",
    [
        (serialize_connect(1), EventType.CONNECT),
        (serialize_disconnect(1), EventType.DISCONNECT),
        (serialize_message(1, b"x"), EventType.MESSAGE),
    ],
)
def test_event_type(data, expected):
    assert event_type(data) is expected


def test_event_type_unknown():
    with pytest.raises(ValueError):
        event_type(bytes([9]))


def test_client_id_too_large():
    with pytest.raises(ValueError):
        serialize_connect(256)


def test_parse_connect_wrong_length():
    with pytest.raises(ValueError):
        parse_connect(serialize_connect(1) + b"\x00")


def test_parse_disconnect_of_connect_rejected():
    with pytest.raises(ValueError):
        parse_disconnect(serialize_connect(1))


def test_parse_message_truncated():
    with pytest.raises(ValueError):
        parse_message(serialize_message(1, b"hello")[:-1])