from __future__ import annotations

import math
from dataclasses import dataclass

from blockworld.constants import (
    EYE_HEIGHT_FACTOR,
    GRAVITY,
    JUMP_SPEED,
    MOVE_ACCELERATION,
    MOVE_DECELERATION,
    PLAYER_HEIGHT,
    PLAYER_RADIUS,
    WALK_SPEED,
)
from blockworld.physics.collision import Vec3f, overlaps_cell, resolve
from blockworld.world.store import VoxelStore


@dataclass
class PlayerBody:
    position: Vec3f
    velocity: Vec3f = (0.0, 0.0, 0.0)
    on_ground: bool = False
    height: float = PLAYER_HEIGHT
    radius: float = PLAYER_RADIUS

    @property
    def eye_position(self) -> Vec3f:
        x, y, z = self.position
        return x, y + self.height * EYE_HEIGHT_FACTOR, z


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _ease(current: float, target: float, dt: float) -> float:
    speeding_up = abs(target) > abs(current) or _sign(target) != _sign(current)
    rate = MOVE_ACCELERATION if speeding_up else MOVE_DECELERATION
    value = current + (target - current) * (1.0 - math.exp(-rate * dt))
    if abs(value) < 0.01 and abs(target) < 0.01:
        return 0.0
    return value


def step(store: VoxelStore, body: PlayerBody, dt: float, wish: tuple[float, float] = (0.0, 0.0), jump: bool = False) -> None:
    """Advance ``body`` by ``dt`` seconds toward the horizontal ``wish`` direction."""
    wx, wz = wish
    length = math.sqrt(wx * wx + wz * wz)
    if length > 0:
        wx, wz = wx / length, wz / length

    vx, vy, vz = body.velocity
    vx = _ease(vx, wx * WALK_SPEED, dt)
    vz = _ease(vz, wz * WALK_SPEED, dt)
    if jump and body.on_ground:
        vy = JUMP_SPEED
        body.on_ground = False
    vy -= GRAVITY * dt

    x, y, z = body.position
    result = resolve(
        store,
        body.position,
        (vx, vy, vz),
        (x + vx * dt, y + vy * dt, z + vz * dt),
        height=body.height,
        radius=body.radius,
    )
    body.position = result.position
    body.velocity = result.velocity
    body.on_ground = result.on_ground


def placement_blocked(body: PlayerBody, cell: tuple[int, int, int]) -> bool:
    return overlaps_cell(body.position, cell, height=body.height, radius=body.radius)


def can_place(store: VoxelStore, body: PlayerBody, cell: tuple[int, int, int] | None) -> bool:
    """Whether a block may go into ``cell``: an empty in-range cell clear of the player."""
    if cell is None:
        return False
    x, y, z = cell
    return store.in_bounds(y) and store.get(x, y, z) is None and not placement_blocked(body, cell)
