"""Grid collision for the player's bounding box.

Resolution works one voxel at a time: vertical first, then x, then z. A body moving
more than a voxel per tick can pass through thin walls; callers keep per-tick motion
small by sub-stepping.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from blockworld.constants import GROUND_EPSILON, PLAYER_HEIGHT, PLAYER_RADIUS
from blockworld.world.store import VoxelStore

Vec3f = tuple[float, float, float]


@dataclass(frozen=True)
class CollisionResult:
    position: Vec3f
    velocity: Vec3f
    on_ground: bool


def _footprint(x: float, z: float, radius: float) -> list[tuple[int, int]]:
    return [
        (gx, gz)
        for gx in range(math.floor(x - radius), math.floor(x + radius) + 1)
        for gz in range(math.floor(z - radius), math.floor(z + radius) + 1)
    ]


def _body_rows(y: float, height: float) -> range:
    return range(math.floor(y), math.floor(y + height - GROUND_EPSILON) + 1)


def resolve(
    store: VoxelStore,
    position: Vec3f,
    velocity: Vec3f,
    next_position: Vec3f,
    height: float = PLAYER_HEIGHT,
    radius: float = PLAYER_RADIUS,
) -> CollisionResult:
    """Clamp ``next_position`` against solid voxels; ``position`` is where the body was."""
    nx, ny, nz = next_position
    vx, vy, vz = velocity
    on_ground = False

    check_y = math.floor(ny - GROUND_EPSILON)
    if vy <= 0 and any(store.is_solid(gx, check_y, gz) for gx, gz in _footprint(nx, nz, radius)):
        ny = check_y + 1
        vy = 0.0
        on_ground = True

    # Hitting a ceiling stops upward motion but leaves the position where it is.
    head_y = math.floor(ny + height)
    if vy > 0 and any(store.is_solid(gx, head_y, gz) for gx, gz in _footprint(nx, nz, radius)):
        vy = 0.0

    if vx != 0:
        edge_x = math.floor(nx + (radius if vx > 0 else -radius))
        if any(
            store.is_solid(edge_x, gy, gz)
            for gy in _body_rows(ny, height)
            for gz in range(math.floor(nz - radius), math.floor(nz + radius) + 1)
        ):
            nx = position[0]

    if vz != 0:
        edge_z = math.floor(nz + (radius if vz > 0 else -radius))
        if any(
            store.is_solid(gx, gy, edge_z)
            for gy in _body_rows(ny, height)
            for gx in range(math.floor(nx - radius), math.floor(nx + radius) + 1)
        ):
            nz = position[2]

    return CollisionResult(position=(nx, ny, nz), velocity=(vx, vy, vz), on_ground=on_ground)


def overlaps_cell(
    position: Vec3f,
    cell: tuple[int, int, int],
    height: float = PLAYER_HEIGHT,
    radius: float = PLAYER_RADIUS,
) -> bool:
    """Whether the player's box intersects the voxel spanning ``cell`` to ``cell + 1``."""
    px, py, pz = position
    bx, by, bz = cell
    return (
        px - radius < bx + 1
        and px + radius > bx
        and py < by + 1
        and py + height > by
        and pz - radius < bz + 1
        and pz + radius > bz
    )
