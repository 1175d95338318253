import pytest

from skirmishd import commands, events, messages
from skirmishd.game import Game, GameMode, Player
from skirmishd.geometry import IVec2
from skirmishd.simulation import TICK_DURATION

TICK_US = TICK_DURATION * 1000


def connects(*client_ids):
    return [events.serialize_connect(i) for i in client_ids]


def started_game(*client_ids):
    game = Game(len(client_ids))
    game.update(0, False, connects(*client_ids))
    return game


@pytest.mark.parametrize(
    "requested, expected", [(0, 1), (9, 1), (3, 3), (8, 8), (-2, 1)]
)
def test_target_player_count(requested, expected):
    assert Game(requested).target_player_count == expected


def test_waits_until_target_reached():
    game = Game(2)
    out = game.update(0, False, connects(10))
    assert out == []
    assert game.mode is GameMode.WAITING_FOR_CLIENTS
    assert game.players == [Player(10)]
    assert game.running


def test_start_sends_start_message_to_each_player():
    game = Game(2)
    out = game.update(5, False, connects(10, 11))
    assert game.mode is GameMode.ACTIVE
    assert len(out) == 2
    for index, data in enumerate(out):
        assert commands.command_type(data) is commands.CommandType.SEND
        cmd = commands.parse_send(data)
        assert cmd.client_id == (10, 11)[index]
        start = messages.parse_start(cmd.message)
        assert start == messages.StartMessage(player_count=2, player_index=index)
    assert [p.sim_id for p in game.players] == [0, 1]
    assert game.next_tick_time == 5 + TICK_US


def test_extra_connections_ignored():
    game = Game(1)
    game.update(0, False, connects(10, 11))
    assert [p.client_id for p in game.players] == [10]


def test_disconnect_swaps_last_player_in():
    game = Game(4)
    game.update(0, False, connects(10, 11, 12))
    game.update(0, False, [events.serialize_disconnect(10)])
    assert [p.client_id for p in game.players] == [12, 11]
    assert game.mode is GameMode.WAITING_FOR_CLIENTS


def test_disconnect_unknown_client_keeps_players():
    game = Game(4)
    game.update(0, False, connects(10))
    game.update(0, False, [events.serialize_disconnect(99)])
    assert game.players == [Player(10)]


def test_empty_waiting_game_keeps_running():
    game = Game(2)
    game.update(0, False, connects(10))
    game.update(0, False, [events.serialize_disconnect(10)])
    assert game.running
    assert game.mode is GameMode.WAITING_FOR_CLIENTS


def test_termination_sends_shutdown():
    game = started_game(10)
    out = game.update(1, True, [])
    assert out == [commands.serialize_shutdown()]
    assert game.mode is GameMode.DISCONNECTING
    assert game.update(2, True, []) == []


def test_all_players_leaving_stops_active_game():
    game = started_game(10)
    out = game.update(1, False, [events.serialize_disconnect(10)])
    assert out == [commands.serialize_shutdown()]
    assert not game.running
    assert game.mode is GameMode.STOPPED


def test_players_leaving_while_disconnecting_sends_no_shutdown():
    game = started_game(10)
    game.update(1, True, [])
    out = game.update(2, False, [events.serialize_disconnect(10)])
    assert out == []
    assert not game.running
    assert game.mode is GameMode.STOPPED


def test_no_tick_before_next_tick_time():
    game = started_game(10)
    assert game.update(TICK_US - 1, False, []) == []


def test_tick_broadcasts_empty_order_list():
    game = started_game(10, 11)
    out = game.update(TICK_US, False, [])
    assert len(out) == 1
    cmd = commands.parse_broadcast(out[0])
    assert cmd.client_ids == (10, 11)
    assert messages.parse_order_list(cmd.message) == []
    assert game.next_tick_time == 2 * TICK_US


def test_order_is_broadcast_and_applied():
    game = started_game(10)
    target = IVec2(-600, 500)
    order = messages.serialize_order([0, 1], target)
    game.update(1, False, [events.serialize_message(10, order)])
    assert len(game.order_queue) == 1
    out = game.update(TICK_US, False, [])
    cmd = commands.parse_broadcast(out[0])
    assert messages.parse_order_list(cmd.message) == [
        messages.NetOrder(0, (0, 1), target)
    ]
    assert game.simulation.units[0].target == target
    assert game.simulation.units[1].target == target
    assert game.order_queue == []


def test_order_from_unknown_client_ignored():
    game = started_game(10)
    order = messages.serialize_order([0], IVec2(0, 0))
    game.update(1, False, [events.serialize_message(42, order)])
    assert game.order_queue == []


def test_reply_message_is_accepted():
    game = started_game(10)
    game.update(1, False, [events.serialize_message(10, messages.serialize_reply())])
    assert game.order_queue == []
    assert game.mode is GameMode.ACTIVE


def test_unexpected_message_type_raises():
    game = started_game(10)
    bad = events.serialize_message(10, messages.serialize_start(1, 0))
    with pytest.raises(ValueError):
        game.update(1, False, [bad])


def test_update_sets_delay():
    game = Game(1)
    game.update(0, False, [])
    assert game.delay == 1000
    assert game.running