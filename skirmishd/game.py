"""Server-side game loop: players, order queue and simulation ticks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from . import commands, events, messages, orders
from .messages import MessageType, NetOrder
from .orders import SimulationOrder
from .simulation import TICK_DURATION, UNDEFINED_PLAYER_ID, Simulation

log = logging.getLogger(__name__)

PLAYER_MAX = 8
UPDATE_DELAY = 1000  # microseconds


class GameMode(Enum):
    WAITING_FOR_CLIENTS = "waiting_for_clients"
    ACTIVE = "active"
    DISCONNECTING = "disconnecting"
    STOPPED = "stopped"


@dataclass
class Player:
    """A connected client taking part in the game."""

    client_id: int
    sim_id: int = 0


class Game:
    """Collects players, starts the simulation and drives its ticks.

    Each call to :meth:`update` consumes encoded network events and returns
    the encoded network commands the server should execute.
    """

    def __init__(self, target_player_count: int) -> None:
        if 0 < target_player_count <= PLAYER_MAX:
            self.target_player_count = target_player_count
        else:
            self.target_player_count = 1
        self.mode = GameMode.WAITING_FOR_CLIENTS
        self.players: list[Player] = []
        self.order_queue: list[bytes] = []
        self.simulation: Simulation | None = None
        self.next_tick_time = 0
        self.running = True
        self.delay = UPDATE_DELAY

    def _find_player_index(self, client_id: int) -> int | None:
        for index, player in enumerate(self.players):
            if player.client_id == client_id:
                return index
        return None

    def _sim_id_of(self, client_id: int) -> int:
        index = self._find_player_index(client_id)
        if index is None:
            return UNDEFINED_PLAYER_ID
        return self.players[index].sim_id

    def _remove_player(self, index: int) -> None:
        self.players[index] = self.players[-1]
        self.players.pop()

    def _broadcast(self, message: bytes) -> bytes:
        client_ids = [player.client_id for player in self.players]
        return commands.serialize_broadcast(client_ids, message)

    def _process_message(self, event: events.MessageEvent) -> None:
        kind = messages.message_type(event.message)
        if kind is MessageType.REPLY:
            log.info("Received reply.")
        elif kind is MessageType.ORDER:
            message = messages.parse_order(event.message)
            player_id = self._sim_id_of(event.client_id)
            if player_id != UNDEFINED_PLAYER_ID:
                order = SimulationOrder(player_id, message.unit_ids, message.target)
                self.order_queue.append(orders.serialize_order(order))
        else:
            raise ValueError(f"unexpected message type {kind.name} from client")

    def _process_events(self, incoming: Iterable[bytes]) -> None:
        for data in incoming:
            kind = events.event_type(data)
            if kind is events.EventType.CONNECT:
                log.info("Game got connection event.")
                if len(self.players) != self.target_player_count:
                    client_id = events.parse_connect(data).client_id
                    log.info("Added player with client id %d", client_id)
                    self.players.append(Player(client_id))
            elif kind is events.EventType.DISCONNECT:
                log.info("Game got disconnect event.")
                client_id = events.parse_disconnect(data).client_id
                index = self._find_player_index(client_id)
                if index is not None:
                    self._remove_player(index)
                    log.info("Removed player with client id %d.", client_id)
            else:
                event = events.parse_message(data)
                log.info(
                    "Got message from client %d of length %d",
                    event.client_id,
                    len(event.message),
                )
                self._process_message(event)

    def _start(self, time: int) -> list[bytes]:
        self.simulation = Simulation()
        for player in self.players:
            player.sim_id = self.simulation.create_player()
        count = len(self.players)
        out = [
            commands.serialize_send(
                player.client_id, messages.serialize_start(count, index)
            )
            for index, player in enumerate(self.players)
        ]
        self.next_tick_time = time + TICK_DURATION * 1000
        log.info("Starting game...")
        self.mode = GameMode.ACTIVE
        return out

    def _tick(self) -> list[bytes]:
        tick_orders = [orders.parse_order(data) for data in self.order_queue]
        net_orders = [
            NetOrder(order.player_id, order.unit_ids, order.target)
            for order in tick_orders
        ]
        out = [self._broadcast(messages.serialize_order_list(net_orders))]
        assert self.simulation is not None
        self.simulation.tick(tick_orders)
        self.order_queue.clear()
        self.next_tick_time += TICK_DURATION * 1000
        return out

    def update(
        self, time: int, termination_requested: bool, events: Iterable[bytes]
    ) -> list[bytes]:
        """Advance the game to ``time`` (microseconds) and return commands."""
        self._process_events(events)
        out: list[bytes] = []

        if self.mode is not GameMode.DISCONNECTING and termination_requested:
            self.mode = GameMode.DISCONNECTING
            out.append(commands.serialize_shutdown())
        elif self.mode is not GameMode.WAITING_FOR_CLIENTS and not self.players:
            log.info("All players have left. Stopping game.")
            if self.mode is not GameMode.DISCONNECTING:
                out.append(commands.serialize_shutdown())
            self.running = False
            self.mode = GameMode.STOPPED
        elif (
            self.mode is GameMode.WAITING_FOR_CLIENTS
            and len(self.players) == self.target_player_count
        ):
            out.extend(self._start(time))
        elif self.mode is GameMode.ACTIVE:
            if time >= self.next_tick_time:
                out.extend(self._tick())

        self.delay = UPDATE_DELAY
        return out