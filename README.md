# skirmishd

A dedicated server for a small real-time strategy skirmish. The server
listens for TCP clients on port 4321 on all interfaces. When the expected
number of players has joined, it starts a deterministic unit simulation and
sends each player a start message with the player count and that player's
index. On every 100 ms tick it takes the orders the players sent since the
last tick, broadcasts them to everyone as one order-list message, and
advances its own copy of the world.

## Running

```
pip install .
skirmishd 2
```

The optional argument is the number of players to wait for. Only its first
character is read, as a digit. Counts from 1 to 8 are used as given; anything
else, or no argument, means one player. Press Ctrl-C to shut the server
down. It then shuts down every client connection and exits once all players
have disconnected. The server also stops by itself when every player has
left a running game. Progress is logged to standard error.

## Protocol

Every packet on the wire is a 16-bit little-endian length followed by that
many bytes of message. The first byte of a message is its type:

| Type | Value | Direction | Body |
|------|-------|-----------|------|
| `START` | 123 | server to client | player count (u8), player index (u8) |
| `ORDER_LIST` | 124 | server to client | order count (u16), then per order: player id (u8), unit count (u16), target x and y (s16), unit ids (u16 each) |
| `ORDER` | 125 | client to server | unit count (u16), target x and y (s16), unit ids (u16 each) |
| `REPLY` | 126 | client to server | none |

All integers are little-endian. A client message of any other type stops
the server's network thread with a `ValueError`.

## Using it as a library

The wire formats and the simulation can be used without the server:

- `skirmishd.messages` encodes and decodes client/server messages:
  `serialize_start`, `serialize_reply`, `serialize_order`,
  `serialize_order_list`, `parse_start`, `parse_order`, `parse_order_list`
  and `message_type`, with the `MessageType` enum and the `StartMessage`,
  `OrderMessage` and `NetOrder` dataclasses.
- `skirmishd.packets` frames messages with `frame_packet` and finds the
  first complete one in received bytes with `extract_packet`.
- `skirmishd.geometry` holds `IVec2` and `IRect`.
- `skirmishd.simulation.Simulation` is the unit simulation. Each player
  added with `create_player()` gets 256 units at one of four start positions.
  `find_units(rect, player_id, limit)` selects a player's units inside a
  rectangle. `tick(orders)` applies `skirmishd.orders.SimulationOrder`
  values, moves units towards their targets and pushes apart units that
  overlap each other or the trees. `unit_position(unit)` reads where a unit
  is.
- `skirmishd.game.Game` is the server's game logic, independent of
  sockets. `update(time, termination_requested, events)` takes encoded
  events from `skirmishd.events` and returns encoded commands from
  `skirmishd.commands`.
- `skirmishd.network.NetServer` is the socket side. Run it in its own thread
  with `run()`, and talk to it with `send`, `broadcast`, `shutdown` and
  `read_event`.

## What it does not do

There is no game client here: nothing that draws the world, takes player
input or sends orders. The server does not check orders beyond decoding
them. It also has no timeout for shutting down. After Ctrl-C it waits until
every client has closed its connection.

## Tests

```
pip install .[test]
pytest
```