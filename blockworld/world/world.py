from __future__ import annotations

import logging
import time
from contextlib import nullcontext
from typing import Callable, Iterator

from blockworld.blocks import BlockType
from blockworld.constants import CHUNK_REBUILD_BUDGET_MS, CHUNK_SIZE, RENDER_DISTANCE, REACH_DISTANCE, WORLD_HEIGHT, ChunkKey
from blockworld.debug.profiler import RuntimeProfiler
from blockworld.graphics.mesher import BatchConsumer, MeshBatch, MeshBuilder
from blockworld.physics.raycast import RayHit, cast
from blockworld.world.chunks import ChunkManager
from blockworld.world.scheduler import RebuildScheduler
from blockworld.world.store import VoxelStore
from blockworld.world.terrain import TerrainGenerator


class World:
    CHUNK_SIZE = CHUNK_SIZE
    WORLD_HEIGHT = WORLD_HEIGHT
    RENDER_DISTANCE = RENDER_DISTANCE
    CHUNK_REBUILD_BUDGET_MS = CHUNK_REBUILD_BUDGET_MS
    CHUNKS_GENERATED_PER_UPDATE = 2

    def __init__(
        self,
        seed: int = 90125,
        render_distance: int | None = None,
        rebuild_budget_ms: float | None = None,
        consumer: BatchConsumer | None = None,
        profiler: RuntimeProfiler | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.seed = seed
        self.render_distance = self.RENDER_DISTANCE if render_distance is None else render_distance
        self.rebuild_budget_ms = self.CHUNK_REBUILD_BUDGET_MS if rebuild_budget_ms is None else rebuild_budget_ms
        self.profiler = profiler

        self.store = VoxelStore(self.CHUNK_SIZE, self.WORLD_HEIGHT)
        self.terrain = TerrainGenerator(seed)
        self.scheduler = RebuildScheduler(self._rebuild_queued, clock=clock, profiler=profiler)
        self.chunks = ChunkManager(self.store, self.terrain, self.scheduler)
        self.mesher = MeshBuilder(self.store, self.chunks, consumer)
        logging.info(f"Created world with seed {seed}, render distance {self.render_distance}")

    def _profile(self, name: str):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.section(name)

    def set_consumer(self, consumer: BatchConsumer | None) -> None:
        self.mesher.consumer = consumer

    def chunk_coords(self, x: float, z: float) -> ChunkKey:
        return self.store.chunk_coords(x, z)

    def height_at(self, x: int, z: int) -> int:
        return min(self.WORLD_HEIGHT - 1, self.terrain.height_at(x, z))

    def spawn_height(self, x: int, z: int) -> int:
        """Feet height just above the highest voxel in column (x, z), trees included."""
        self.generate(*self.chunk_coords(x, z))
        top = next((y for y in range(self.WORLD_HEIGHT - 1, -1, -1) if self.store.get(x, y, z) is not None), -1)
        return top + 1

    def get(self, x: int, y: int, z: int) -> BlockType | None:
        return self.store.get(x, y, z)

    def set(self, x: int, y: int, z: int, block: BlockType | None) -> bool:
        return self.store.set(x, y, z, block)

    def cast(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        max_distance: float = REACH_DISTANCE,
    ) -> RayHit:
        return cast(self.store, origin, direction, max_distance)

    def generate(self, cx: int, cz: int) -> bool:
        with self._profile("world.chunk.generate"):
            return self.chunks.generate(cx, cz)

    def rebuild_chunk(self, cx: int, cz: int) -> tuple[MeshBatch, ...]:
        return self.mesher.rebuild_chunk(cx, cz)

    def _rebuild_queued(self, chunk: ChunkKey) -> None:
        # A direct rebuild_chunk call may already have brought a queued chunk up to date.
        if self.chunks.require(chunk).dirty:
            self.mesher.rebuild_chunk(*chunk)

    def batches_for(self, chunk: ChunkKey) -> tuple[MeshBatch, ...]:
        return self.mesher.batches_for(chunk)

    def ensure_chunks_around(
        self,
        position: tuple[float, float, float],
        radius: int | None = None,
        limit: int | None = None,
    ) -> list[ChunkKey]:
        """Generate missing chunks near ``position``, nearest first; ``limit`` caps the count."""
        px, _, pz = position
        center = self.chunk_coords(px, pz)
        missing = self.chunks.missing_in_radius(center, self.render_distance if radius is None else radius)
        if limit is not None:
            missing = missing[:limit]
        for cx, cz in missing:
            self.generate(cx, cz)
        return missing

    def update(self, position: tuple[float, float, float]) -> int:
        with self._profile("world.update.generate"):
            self.ensure_chunks_around(position, limit=self.CHUNKS_GENERATED_PER_UPDATE)
        with self._profile("world.update.rebuild"):
            return self.scheduler.drain(self.rebuild_budget_ms)

    def prime(self, position: tuple[float, float, float], radius: int | None = None) -> Iterator[tuple[int, int]]:
        """Generate then mesh every chunk around ``position``, yielding ``(done, total)`` after each step."""
        px, _, pz = position
        center = self.chunk_coords(px, pz)
        chunks = self.chunks.chunks_in_radius(center, self.render_distance if radius is None else radius)
        total = len(chunks) * 2
        done = 0
        for cx, cz in chunks:
            self.generate(cx, cz)
            done += 1
            yield done, total
        for cx, cz in chunks:
            self.rebuild_chunk(cx, cz)
            done += 1
            yield done, total
        # Drops the queue entries left by generation; those chunks are already meshed and get skipped.
        self.scheduler.flush()
        logging.info(f"Primed {len(chunks)} chunks around chunk {center}")

    def diagnostics_snapshot(self) -> dict[str, int]:
        return {
            "voxels": len(self.store),
            "chunks": len(self.chunks),
            "meshed_chunks": len(self.mesher.meshed_chunks()),
            "queued_rebuilds": len(self.scheduler),
        }
