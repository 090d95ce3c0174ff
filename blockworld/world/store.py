from __future__ import annotations

import math
from typing import Callable, Iterator

from blockworld.blocks import BlockType
from blockworld.constants import CHUNK_SIZE, WORLD_HEIGHT, ChunkKey, Vec3

DirtyListener = Callable[[list[ChunkKey]], None]


class VoxelStore:
    """Sparse block storage keyed by integer world coordinates.

    Empty cells have no entry; ``get`` reports them as ``None``. Every write goes
    through ``set`` so that listeners learn which chunks' meshes went stale.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, world_height: int = WORLD_HEIGHT) -> None:
        self.chunk_size = chunk_size
        self.world_height = world_height
        self._blocks: dict[Vec3, BlockType] = {}
        self._listeners: list[DirtyListener] = []

    def __len__(self) -> int:
        return len(self._blocks)

    def add_dirty_listener(self, listener: DirtyListener) -> None:
        self._listeners.append(listener)

    def in_bounds(self, y: int) -> bool:
        return 0 <= y < self.world_height

    def chunk_coords(self, x: float, z: float) -> ChunkKey:
        return math.floor(x / self.chunk_size), math.floor(z / self.chunk_size)

    def affected_chunks(self, x: int, z: int) -> list[ChunkKey]:
        """Owning chunk first, then each neighbor sharing the edited cell's boundary plane."""
        cx, cz = self.chunk_coords(x, z)
        chunks = [(cx, cz)]
        lx = x % self.chunk_size
        lz = z % self.chunk_size
        if lx == 0:
            chunks.append((cx - 1, cz))
        if lx == self.chunk_size - 1:
            chunks.append((cx + 1, cz))
        if lz == 0:
            chunks.append((cx, cz - 1))
        if lz == self.chunk_size - 1:
            chunks.append((cx, cz + 1))
        return chunks

    def get(self, x: int, y: int, z: int) -> BlockType | None:
        return self._blocks.get((x, y, z))

    def set(self, x: int, y: int, z: int, block: BlockType | None) -> bool:
        if not self.in_bounds(y):
            return False
        if block is None:
            self._blocks.pop((x, y, z), None)
        elif isinstance(block, BlockType):
            self._blocks[(x, y, z)] = block
        else:
            raise TypeError(f"expected BlockType or None, got {block!r}")

        if self._listeners:
            chunks = self.affected_chunks(x, z)
            for listener in self._listeners:
                listener(chunks)
        return True

    def is_solid(self, x: int, y: int, z: int) -> bool:
        return (x, y, z) in self._blocks

    def iter_chunk(self, cx: int, cz: int) -> Iterator[tuple[Vec3, BlockType]]:
        x0 = cx * self.chunk_size
        z0 = cz * self.chunk_size
        blocks = self._blocks
        for x in range(x0, x0 + self.chunk_size):
            for z in range(z0, z0 + self.chunk_size):
                for y in range(self.world_height):
                    block = blocks.get((x, y, z))
                    if block is not None:
                        yield (x, y, z), block

    def chunk_snapshot(self, cx: int, cz: int) -> list[tuple[Vec3, BlockType]]:
        return list(self.iter_chunk(cx, cz))
