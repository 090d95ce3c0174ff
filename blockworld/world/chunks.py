from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from blockworld.constants import ChunkKey
from blockworld.world.store import VoxelStore
from blockworld.world.terrain import TerrainGenerator


class ChunkNotGeneratedError(LookupError):
    """A chunk operation was requested for a chunk that was never generated."""


class ChunkState(Enum):
    GENERATED = "generated"
    MESHED = "meshed"


@dataclass
class Chunk:
    key: ChunkKey
    state: ChunkState = ChunkState.GENERATED
    dirty: bool = True


class Enqueuer(Protocol):
    def enqueue(self, chunk: ChunkKey) -> bool: ...


class ChunkManager:
    def __init__(self, store: VoxelStore, terrain: TerrainGenerator, scheduler: Enqueuer) -> None:
        self.store = store
        self.terrain = terrain
        self.scheduler = scheduler
        self._chunks: dict[ChunkKey, Chunk] = {}
        store.add_dirty_listener(self._on_voxels_changed)

    def __contains__(self, chunk: ChunkKey) -> bool:
        return chunk in self._chunks

    def __len__(self) -> int:
        return len(self._chunks)

    def keys(self) -> list[ChunkKey]:
        return list(self._chunks)

    def get(self, chunk: ChunkKey) -> Chunk | None:
        return self._chunks.get(chunk)

    def require(self, chunk: ChunkKey) -> Chunk:
        state = self._chunks.get(chunk)
        if state is None:
            raise ChunkNotGeneratedError(f"chunk {chunk} has not been generated")
        return state

    def generate(self, cx: int, cz: int) -> bool:
        chunk = (cx, cz)
        if chunk in self._chunks:
            return False

        # Writes landing in already generated neighbors dirty them through the store listener.
        written = self.terrain.populate_chunk(self.store, cx, cz, self.store.chunk_size)
        self._chunks[chunk] = Chunk(chunk)
        self.scheduler.enqueue(chunk)
        logging.debug(f"Generated chunk {chunk} ({written} voxels)")
        return True

    def mark_dirty(self, chunk: ChunkKey) -> bool:
        state = self._chunks.get(chunk)
        if state is None:
            return False
        state.dirty = True
        return self.scheduler.enqueue(chunk)

    def mark_meshed(self, chunk: ChunkKey) -> None:
        state = self.require(chunk)
        state.state = ChunkState.MESHED
        state.dirty = False

    def _on_voxels_changed(self, chunks: list[ChunkKey]) -> None:
        for chunk in chunks:
            self.mark_dirty(chunk)

    @staticmethod
    def chunks_in_radius(center: ChunkKey, radius: int) -> list[ChunkKey]:
        """Square ring of chunks around ``center``, nearest first."""
        cx, cz = center
        chunks = [
            (cx + dcx, cz + dcz)
            for dcx in range(-radius, radius + 1)
            for dcz in range(-radius, radius + 1)
        ]
        chunks.sort(key=lambda c: (c[0] - cx) * (c[0] - cx) + (c[1] - cz) * (c[1] - cz))
        return chunks

    def missing_in_radius(self, center: ChunkKey, radius: int) -> list[ChunkKey]:
        return [chunk for chunk in self.chunks_in_radius(center, radius) if chunk not in self._chunks]
