"""Deterministic unit simulation on a uniform grid of cells."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Iterable, NamedTuple

from .geometry import IRect, IVec2
from .orders import SimulationOrder

PLAYER_MAX = 8
UNIT_MAX = 4096
TREE_COUNT = 18
UNIT_HALF_SIZE = 10
TREE_HALF_SIZE = 50
ENTITY_MAX_SIZE = 50
UNDEFINED_PLAYER_ID = PLAYER_MAX
WIDTH = 2000
HEIGHT = 2000
HALF_WIDTH = WIDTH // 2
HALF_HEIGHT = HEIGHT // 2
CELL_SIZE = 100
GRID_WIDTH = (WIDTH + CELL_SIZE - 1) // CELL_SIZE
GRID_HEIGHT = (HEIGHT + CELL_SIZE - 1) // CELL_SIZE
CELL_COUNT = GRID_WIDTH * GRID_HEIGHT
TICK_DURATION = 100  # milliseconds

UNITS_PER_PLAYER = 256
UNIT_SPEED = 0.06
UNIT_SPACING = 30
UNDEFINED_TARGET = IVec2(-0x8000, -0x8000)
START_POSITIONS = (
    IVec2(-700, 500),
    IVec2(700, -500),
    IVec2(-700, -500),
    IVec2(700, 500),
)

_DISTANCE_EPSILON = 0.001
_COLLISION_ATTEMPTS = 4


def _trunc_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


def _cell_pos(pos: IVec2) -> IVec2:
    return IVec2(
        _trunc_div(pos.x + HALF_WIDTH, CELL_SIZE),
        _trunc_div(pos.y + HALF_HEIGHT, CELL_SIZE),
    )


def _cell_index(cell: IVec2) -> int:
    return cell.y * GRID_WIDTH + cell.x


def _cell_index_of(pos: IVec2) -> int:
    return _cell_index(_cell_pos(pos))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _clamp_pos(pos: IVec2) -> IVec2:
    return IVec2(
        _clamp(pos.x, -HALF_WIDTH, HALF_WIDTH - 1),
        _clamp(pos.y, -HALF_HEIGHT, HALF_HEIGHT - 1),
    )


def _in_bounds(pos: IVec2) -> bool:
    return _clamp_pos(pos) == pos


def _to_ivec(x: float, y: float) -> IVec2:
    return IVec2(int(x), int(y))


@dataclass
class Unit:
    """A movable unit owned by a player."""

    id: int
    player_id: int
    body_id: int
    target: IVec2 = UNDEFINED_TARGET


class _Collision(NamedTuple):
    collider_id: int
    collider_pos: IVec2
    direction: tuple[float, float]
    violation: float


class BodyList:
    """Bodies with positions, indexed by the grid cell that holds them."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("body list capacity must be positive")
        self.capacity = capacity
        self._positions: list[IVec2] = []
        self._cells: list[deque[int]] = [deque() for _ in range(CELL_COUNT)]

    def __len__(self) -> int:
        return len(self._positions)

    def add(self, pos: IVec2) -> int:
        """Add a body at ``pos`` and return its id."""
        if len(self._positions) >= self.capacity:
            raise OverflowError("body list is full")
        if not _in_bounds(pos):
            raise ValueError(f"position {pos} is outside the simulation")
        body_id = len(self._positions)
        self._positions.append(pos)
        self._cells[_cell_index_of(pos)].appendleft(body_id)
        return body_id

    def position(self, body_id: int) -> IVec2:
        """Return the position of a body."""
        return self._positions[body_id]

    def move(self, body_id: int, pos: IVec2) -> None:
        """Move a body, clamping ``pos`` to the simulation area."""
        pos = _clamp_pos(pos)
        old_index = _cell_index_of(self._positions[body_id])
        new_index = _cell_index_of(pos)
        if old_index != new_index:
            try:
                self._cells[old_index].remove(body_id)
            except ValueError:
                raise LookupError(
                    f"body {body_id} is missing from its cell"
                ) from None
            self._cells[new_index].appendleft(body_id)
        self._positions[body_id] = pos

    def ids_in_cell(self, cell_index: int) -> tuple[int, ...]:
        """Return the ids of the bodies in a cell, most recently added first."""
        return tuple(self._cells[cell_index])

    def _find_collision(
        self,
        cell_index: int,
        base_id: int,
        base_pos: IVec2,
        distance_min: float,
        violation_min: float,
    ) -> _Collision | None:
        squared_min = distance_min * distance_min
        for body_id in self._cells[cell_index]:
            if body_id == base_id:
                continue
            collider_pos = self._positions[body_id]
            dx = float(base_pos.x - collider_pos.x)
            dy = float(base_pos.y - collider_pos.y)
            squared = dx * dx + dy * dy
            if squared < squared_min:
                distance = math.sqrt(squared)
                if distance < _DISTANCE_EPSILON:
                    direction = (1.0, 0.0)
                else:
                    direction = (dx / distance, dy / distance)
                return _Collision(
                    body_id,
                    collider_pos,
                    direction,
                    max(distance_min - distance, violation_min),
                )
        return None


class Simulation:
    """Units of several players moving among static trees."""

    def __init__(self) -> None:
        self.dynamic_bodies = BodyList(UNIT_MAX)
        self.static_bodies = BodyList(TREE_COUNT)
        self.units: list[Unit] = []
        self.player_count = 0
        for i in range(TREE_COUNT):
            line = i % 6
            self.static_bodies.add(
                IVec2(-750 + line * 150 + i * 50, -350 + line * 150)
            )

    def _create_unit(self, player_id: int, pos: IVec2) -> Unit:
        unit = Unit(
            id=len(self.units),
            player_id=player_id,
            body_id=self.dynamic_bodies.add(pos),
        )
        self.units.append(unit)
        return unit

    def create_player(self) -> int:
        """Add a player with a block of units at its start position."""
        if self.player_count == PLAYER_MAX:
            raise RuntimeError("player limit reached")
        player_id = self.player_count
        base = START_POSITIONS[player_id % len(START_POSITIONS)]
        row_col_count = math.ceil(math.sqrt(UNITS_PER_PLAYER))
        grid_size = UNIT_SPACING * (row_col_count - 1)
        created = 0
        for x in range(row_col_count):
            for y in range(row_col_count):
                if created >= UNITS_PER_PLAYER:
                    break
                translation = _to_ivec(
                    (x / row_col_count - 0.5) * grid_size,
                    (y / row_col_count - 0.5) * grid_size,
                )
                self._create_unit(player_id, base + translation)
                created += 1
        self.player_count += 1
        return player_id

    def find_units(self, rect: IRect, player_id: int, limit: int) -> list[int]:
        """Return ids of the player's units inside ``rect``, at most ``limit``."""
        rect = IRect(_clamp_pos(rect.min), _clamp_pos(rect.max))
        cell_min = _cell_pos(rect.min)
        cell_max = _cell_pos(rect.max)
        found: list[int] = []
        for cell_y in range(cell_min.y, cell_max.y + 1):
            for cell_x in range(cell_min.x, cell_max.x + 1):
                cell_index = _cell_index(IVec2(cell_x, cell_y))
                for body_id in self.dynamic_bodies.ids_in_cell(cell_index):
                    if self.units[body_id].player_id != player_id:
                        continue
                    if rect.contains(self.dynamic_bodies.position(body_id)):
                        found.append(body_id)
                        if len(found) == limit:
                            return found
        return found

    def tick(self, orders: Iterable[SimulationOrder]) -> None:
        """Apply orders, move units towards their targets and resolve collisions."""
        for order in orders:
            for unit_id in order.unit_ids:
                if not 0 <= unit_id < len(self.units):
                    raise ValueError(f"unknown unit id {unit_id}")
                unit = self.units[unit_id]
                if unit.player_id == order.player_id:
                    unit.target = order.target
        self._update_units()
        self._perform_collisions()

    def unit_position(self, unit: Unit) -> IVec2:
        """Return the current position of ``unit``."""
        return self.dynamic_bodies.position(unit.body_id)

    def _update_units(self) -> None:
        step = UNIT_SPEED * TICK_DURATION
        for unit in self.units:
            if unit.target == UNDEFINED_TARGET:
                continue
            pos = self.dynamic_bodies.position(unit.body_id)
            dx = float(unit.target.x - pos.x)
            dy = float(unit.target.y - pos.y)
            squared = dx * dx + dy * dy
            if squared <= 0.01:
                continue
            distance = math.sqrt(squared)
            change_x = dx / distance * step
            change_y = dy / distance * step
            length = math.hypot(change_x, change_y)
            if length > distance:
                scale = distance / length
                change_x *= scale
                change_y *= scale
            self.dynamic_bodies.move(
                unit.body_id, _to_ivec(pos.x + change_x, pos.y + change_y)
            )

    def _perform_collisions(self) -> None:
        for unit in self.units:
            for _ in range(_COLLISION_ATTEMPTS):
                if not self._bounce_once(unit):
                    break

    def _bounce_once(self, unit: Unit) -> bool:
        tree_distance = float(TREE_HALF_SIZE + UNIT_HALF_SIZE)
        unit_distance = float(UNIT_HALF_SIZE * 2)
        dynamic = self.dynamic_bodies
        pos = dynamic.position(unit.body_id)
        reach = IVec2(ENTITY_MAX_SIZE, ENTITY_MAX_SIZE)
        cell_min = _cell_pos(_clamp_pos(pos - reach))
        cell_max = _cell_pos(_clamp_pos(pos + reach))
        for cell_y in range(cell_min.y, cell_max.y + 1):
            for cell_x in range(cell_min.x, cell_max.x + 1):
                cell_index = _cell_index(IVec2(cell_x, cell_y))

                hit = dynamic._find_collision(
                    cell_index, unit.id, pos, unit_distance, 2.0
                )
                if hit is not None:
                    scale = hit.violation * 0.501
                    bounce = _to_ivec(hit.direction[0] * scale, hit.direction[1] * scale)
                    dynamic.move(unit.body_id, pos + bounce)
                    dynamic.move(hit.collider_id, hit.collider_pos - bounce)
                    return True

                hit = self.static_bodies._find_collision(
                    cell_index, unit.id, pos, tree_distance, 1.0
                )
                if hit is not None:
                    scale = hit.violation * 1.001
                    bounce = _to_ivec(hit.direction[0] * scale, hit.direction[1] * scale)
                    dynamic.move(unit.body_id, pos + bounce)
                    return True
        return False