"""Command-line entry point: run the game server until it stops."""

from __future__ import annotations

import logging
import signal
import sys
import threading
import time
from typing import Iterable, Sequence

from .commands import CommandType, command_type, parse_broadcast, parse_send
from .game import Game
from .network import NetServer

DEFAULT_PLAYER_COUNT = 1
MIN_SLEEP = 200  # microseconds


def parse_player_count(argv: Sequence[str]) -> int:
    """Return the player count given as the single argument's first digit.

    Without exactly one argument the default of one player is used. Values
    outside the supported range are left for the game to replace.
    """
    if len(argv) != 1 or not argv[0]:
        return DEFAULT_PLAYER_COUNT
    return ord(argv[0][0]) - ord("0")


def execute_commands(server, commands: Iterable[bytes]) -> None:
    """Hand each encoded command to ``server`` in order."""
    for command in commands:
        kind = command_type(command)
        if kind is CommandType.BROADCAST:
            parsed = parse_broadcast(command)
            server.broadcast(parsed.client_ids, parsed.message)
        elif kind is CommandType.SEND:
            parsed = parse_send(command)
            server.send(parsed.client_id, parsed.message)
        else:
            server.shutdown()


def _now_us() -> int:
    return time.monotonic_ns() // 1000


def _drain_events(server: NetServer) -> list[bytes]:
    pending = []
    while (event := server.read_event()) is not None:
        pending.append(event)
    return pending


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server; stop on SIGINT or once every player has left."""
    if argv is None:
        argv = sys.argv[1:]
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    game = Game(parse_player_count(argv))
    termination = threading.Event()

    in_main_thread = threading.current_thread() is threading.main_thread()
    previous_handler = None
    if in_main_thread:
        previous_handler = signal.signal(
            signal.SIGINT, lambda signum, frame: termination.set()
        )

    try:
        with NetServer() as server:
            net_thread = threading.Thread(target=server.run, name="net", daemon=True)
            net_thread.start()

            print("Listening...", flush=True)
            start = _now_us()
            while game.running:
                duration = _now_us() - start
                pending = _drain_events(server)
                out = game.update(duration, termination.is_set(), pending)
                execute_commands(server, out)

                conservative_delay = game.delay // 2
                if conservative_delay > MIN_SLEEP:
                    time.sleep(conservative_delay / 1_000_000)

            net_thread.join()
    finally:
        if in_main_thread and previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    print("Gracefully terminated.", flush=True)
    return 0