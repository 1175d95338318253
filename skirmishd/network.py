"""TCP server thread that turns sockets into game events and runs commands."""

from __future__ import annotations

import logging
import queue
import select
import socket
from enum import Enum

from . import commands, events, messages, packets
from .clients import Client, ClientSet
from .commands import CommandType
from .messages import NET_MESSAGE_MAX_LENGTH, MessageType

log = logging.getLogger(__name__)

DEFAULT_PORT = 4321
LISTEN_BACKLOG = 5
RECEIVE_SIZE = 10 * 1024


class NetMode(Enum):
    RUNNING = "running"
    DISCONNECTING = "disconnecting"
    STOPPED = "stopped"


class NetServer:
    """Accepts clients and exchanges framed packets with them.

    :meth:`run` is meant for its own thread. Other threads queue commands with
    :meth:`send`, :meth:`broadcast` and :meth:`shutdown`, and collect encoded
    events with :meth:`read_event`.
    """

    def __init__(self, host: str = "", port: int = DEFAULT_PORT) -> None:
        self.mode = NetMode.RUNNING
        self.clients = ClientSet()
        self._commands: queue.SimpleQueue[bytes] = queue.SimpleQueue()
        self._events: queue.SimpleQueue[bytes] = queue.SimpleQueue()
        self._wake_read, self._wake_write = socket.socketpair()
        self._wake_read.setblocking(False)
        self._host = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._host.setblocking(False)
            self._host.bind((host, port))
            self._host.listen(LISTEN_BACKLOG)
        except OSError:
            self.close()
            raise

    @property
    def address(self) -> tuple[str, int]:
        """The address the server listens on."""
        return self._host.getsockname()

    def __enter__(self) -> NetServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _wake(self) -> None:
        self._wake_write.send(b"\x01")

    def _queue_command(self, command: bytes) -> None:
        self._commands.put(command)
        self._wake()

    def shutdown(self) -> None:
        """Ask the server to disconnect every client and stop."""
        self._queue_command(commands.serialize_shutdown())

    def broadcast(self, client_ids, message: bytes) -> None:
        """Queue ``message`` for each listed client still connected."""
        self._queue_command(commands.serialize_broadcast(list(client_ids), message))

    def send(self, client_id: int, message: bytes) -> None:
        """Queue ``message`` for one client, if still connected."""
        self._queue_command(commands.serialize_send(client_id, message))

    def read_event(self) -> bytes | None:
        """Return the next encoded event, or None if there is none."""
        try:
            return self._events.get_nowait()
        except queue.Empty:
            return None

    def run(self) -> None:
        """Serve until a shutdown has disconnected every client."""
        self.mode = NetMode.RUNNING
        while self.mode is not NetMode.STOPPED:
            watched = [client.sock for client in self.clients]
            watched.append(self._wake_read)
            accepting = self.mode is NetMode.RUNNING and not self.clients.full
            if accepting:
                watched.append(self._host)
            readable, _, _ = select.select(watched, [], [])
            ready = set(readable)

            for client in self.clients:
                if client.sock in ready:
                    self._receive(client)

            if self._wake_read in ready:
                self._drain_wake()
                self._process_commands()

            if accepting and self._host in ready and self.mode is NetMode.RUNNING:
                self._accept()

            if self.mode is NetMode.DISCONNECTING and len(self.clients) == 0:
                log.info("No more clients. Stopping.")
                self.mode = NetMode.STOPPED

    def close(self) -> None:
        """Release every socket the server holds."""
        for client in self.clients:
            client.sock.close()
            self.clients.remove(client)
        for sock in (self._wake_read, self._wake_write, getattr(self, "_host", None)):
            if sock is not None:
                sock.close()

    def _drain_wake(self) -> None:
        try:
            while self._wake_read.recv(1024):
                pass
        except BlockingIOError:
            pass

    def _accept(self) -> None:
        try:
            sock, _ = self._host.accept()
        except BlockingIOError:
            return
        sock.setblocking(True)
        client = self.clients.create(sock)
        log.info("Client connected, id %d", client.id)
        self._events.put(events.serialize_connect(client.id))

    def _receive(self, client: Client) -> None:
        try:
            data = packets.receive(client.sock, RECEIVE_SIZE)
        except ConnectionError:
            data = b""
        if not data:
            client.sock.close()
            self.clients.remove(client)
            self._events.put(events.serialize_disconnect(client.id))
            log.info("A client disconnected. (%d)", client.id)
            return
        client.feed(data)
        self._process_incoming(client)

    def _process_incoming(self, client: Client) -> None:
        while True:
            message = packets.extract_packet(
                bytes(client.in_buffer[:NET_MESSAGE_MAX_LENGTH])
            )
            if not message:
                break
            kind = messages.message_type(message)
            if kind is MessageType.ORDER:
                messages.parse_order(message)
            elif kind is not MessageType.REPLY:
                raise ValueError(f"unexpected message type {kind.name} from client")
            self._events.put(events.serialize_message(client.id, message))
            client.consume(packets.PACKET_HEADER_SIZE + len(message))

    def _process_commands(self) -> None:
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                return
            kind = commands.command_type(command)
            if kind is CommandType.BROADCAST:
                parsed = commands.parse_broadcast(command)
                for client_id in parsed.client_ids:
                    client = self.clients.find(client_id)
                    if client is not None:
                        packets.send_packet(client.sock, parsed.message)
            elif kind is CommandType.SEND:
                parsed = commands.parse_send(command)
                client = self.clients.find(parsed.client_id)
                if client is not None:
                    log.info("Sent to client id %d", parsed.client_id)
                    packets.send_packet(client.sock, parsed.message)
            else:
                for client in self.clients:
                    try:
                        client.sock.shutdown(socket.SHUT_RDWR)
                    except OSError:
                        pass
                self.mode = NetMode.DISCONNECTING