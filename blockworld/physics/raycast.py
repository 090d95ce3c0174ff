from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar

from blockworld.constants import RAY_FACE_EPSILON, RAY_STEP, REACH_DISTANCE, Vec3
from blockworld.world.store import VoxelStore


@dataclass(frozen=True)
class RayHit:
    hit: bool
    position: Vec3 | None = None
    normal: Vec3 | None = None

    MISS: ClassVar[RayHit]

    def adjacent(self) -> Vec3 | None:
        """The empty cell in front of the hit face, where a placed block goes."""
        if not self.hit or self.position is None or self.normal is None:
            return None
        return tuple(p + n for p, n in zip(self.position, self.normal))  # type: ignore[return-value]


RayHit.MISS = RayHit(hit=False)


def _hit_normal(local: tuple[float, float, float], epsilon: float) -> Vec3:
    lx, ly, lz = local
    if lx <= epsilon:
        return -1, 0, 0
    if lx >= 1 - epsilon:
        return 1, 0, 0
    if ly <= epsilon:
        return 0, -1, 0
    if ly >= 1 - epsilon:
        return 0, 1, 0
    if lz <= epsilon:
        return 0, 0, -1
    if lz >= 1 - epsilon:
        return 0, 0, 1
    return 0, 0, 0


def cast(
    store: VoxelStore,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_distance: float = REACH_DISTANCE,
    step: float = RAY_STEP,
    epsilon: float = RAY_FACE_EPSILON,
) -> RayHit:
    """March from ``origin`` in fixed steps and report the first occupied cell.

    This is a sampled march rather than an exact grid walk: features thinner than
    ``step`` can be skipped and the normal is ambiguous near cell edges.
    """
    if not math.isfinite(max_distance) or max_distance <= 0:
        raise ValueError(f"max_distance must be a positive finite number, got {max_distance!r}")

    dx, dy, dz = direction
    length = math.sqrt(dx * dx + dy * dy + dz * dz)
    if length == 0:
        return RayHit.MISS
    dx, dy, dz = dx / length, dy / length, dz / length
    ox, oy, oz = origin

    for i in range(math.ceil(max_distance / step)):
        distance = i * step
        px, py, pz = ox + dx * distance, oy + dy * distance, oz + dz * distance
        cell = (math.floor(px), math.floor(py), math.floor(pz))
        if store.is_solid(*cell):
            local = (px - cell[0], py - cell[1], pz - cell[2])
            return RayHit(hit=True, position=cell, normal=_hit_normal(local, epsilon))
    return RayHit.MISS
