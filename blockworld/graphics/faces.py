from __future__ import annotations

from blockworld.blocks import Gradient, get_block_definition
from blockworld.constants import FaceDirection, Vec3
from blockworld.graphics.mesher import MeshBatch

# Unit-cube corners per face, counter-clockwise seen from outside. A voxel at
# (x, y, z) spans x..x+1, y..y+1, z..z+1, matching collision and raycasting.
FACE_CORNERS: dict[FaceDirection, tuple[Vec3, Vec3, Vec3, Vec3]] = {
    FaceDirection.PX: ((1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)),
    FaceDirection.NX: ((0, 0, 1), (0, 1, 1), (0, 1, 0), (0, 0, 0)),
    FaceDirection.PY: ((0, 1, 0), (0, 1, 1), (1, 1, 1), (1, 1, 0)),
    FaceDirection.NY: ((0, 0, 1), (0, 0, 0), (1, 0, 0), (1, 0, 1)),
    FaceDirection.PZ: ((0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)),
    FaceDirection.NZ: ((1, 0, 0), (0, 0, 0), (0, 1, 0), (1, 1, 0)),
}

FACE_SHADES = {
    FaceDirection.PX: 0.86,
    FaceDirection.NX: 0.86,
    FaceDirection.PY: 1.0,
    FaceDirection.NY: 0.55,
    FaceDirection.PZ: 0.72,
    FaceDirection.NZ: 0.72,
}

_TRIANGLE_ORDER = (0, 1, 2, 0, 2, 3)
VERTICES_PER_FACE = len(_TRIANGLE_ORDER)


def face_triangles(face: FaceDirection) -> list[Vec3]:
    corners = FACE_CORNERS[face]
    return [corners[i] for i in _TRIANGLE_ORDER]


def corner_colors(batch: MeshBatch) -> list[tuple[float, float, float, float]]:
    """RGBA for each triangle vertex of one face of ``batch``."""
    definition = get_block_definition(batch.block)
    shade = FACE_SHADES[batch.face]
    appearance = definition.appearance
    colors = []
    for _, cy, _ in face_triangles(batch.face):
        if isinstance(appearance, Gradient):
            if batch.face is FaceDirection.PY:
                rgb = appearance.top
            elif batch.face is FaceDirection.NY:
                rgb = appearance.bottom
            else:
                rgb = appearance.top if cy else appearance.bottom
        else:
            rgb = appearance.color
        colors.append((rgb[0] * shade, rgb[1] * shade, rgb[2] * shade, definition.opacity))
    return colors


def batch_vertices(batch: MeshBatch) -> list[float]:
    triangles = face_triangles(batch.face)
    vertices: list[float] = []
    for x, y, z in batch.positions:
        for cx, cy, cz in triangles:
            vertices.extend((x + cx, y + cy, z + cz))
    return vertices


def batch_colors(batch: MeshBatch) -> list[float]:
    face_colors = [c for color in corner_colors(batch) for c in color]
    return face_colors * len(batch.positions)
