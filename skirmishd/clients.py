"""Connected clients of the network server and their input buffers."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Iterator

CLIENT_MAX = 16
IN_BUFFER_CAPACITY = 50 * 1024
FIRST_CLIENT_ID = 10


@dataclass(eq=False)
class Client:
    """A connected client: its socket, id and bytes received but not yet used."""

    sock: Any
    id: int
    in_buffer: bytearray = field(default_factory=bytearray)
    capacity: int = IN_BUFFER_CAPACITY

    def feed(self, data: bytes) -> None:
        """Append received bytes to the input buffer."""
        if len(self.in_buffer) + len(data) > self.capacity:
            raise OverflowError(f"input buffer of client {self.id} is full")
        self.in_buffer += data

    def consume(self, count: int) -> None:
        """Drop ``count`` bytes from the front of the input buffer."""
        if not 0 <= count <= len(self.in_buffer):
            raise ValueError(
                f"cannot consume {count} of {len(self.in_buffer)} buffered bytes"
            )
        del self.in_buffer[:count]


class ClientSet:
    """A bounded set of clients, each given a fresh id."""

    def __init__(self, capacity: int = CLIENT_MAX) -> None:
        self.capacity = capacity
        self._clients: list[Client] = []
        self._ids = itertools.count(FIRST_CLIENT_ID)

    @property
    def full(self) -> bool:
        return len(self._clients) >= self.capacity

    def create(self, sock: Any) -> Client:
        """Add a client for ``sock`` and return it."""
        if self.full:
            raise OverflowError("client set is full")
        client = Client(sock, next(self._ids))
        self._clients.append(client)
        return client

    def find(self, client_id: int) -> Client | None:
        """Return the client with ``client_id``, or None."""
        return next((c for c in self._clients if c.id == client_id), None)

    def remove(self, client: Client) -> None:
        """Remove ``client``; the last client takes its place."""
        index = next(
            (i for i, current in enumerate(self._clients) if current is client), None
        )
        if index is None:
            raise KeyError(f"client {client.id} is not in the set")
        self._clients[index] = self._clients[-1]
        self._clients.pop()

    def __iter__(self) -> Iterator[Client]:
        # A snapshot, so clients may be removed while iterating.
        return iter(list(self._clients))

    def __len__(self) -> int:
        return len(self._clients)