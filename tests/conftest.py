from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from blockworld.constants import ChunkKey
from blockworld.graphics.mesher import MeshBatch, MeshBuilder
from blockworld.world.chunks import ChunkManager
from blockworld.world.scheduler import RebuildScheduler
from blockworld.world.store import VoxelStore
from blockworld.world.terrain import Biome, TerrainGenerator


class StubTerrain(TerrainGenerator):
    """Terrain with hand-picked heights, one biome everywhere and trees only where listed."""

    def __init__(
        self,
        heights: Callable[[int, int], int] = lambda x, z: 4,
        biome: Biome = Biome.GRASSLAND,
        trees: tuple[tuple[int, int], ...] = (),
    ) -> None:
        super().__init__(seed=0)
        self.heights = heights
        self.biome = biome
        self.trees = set(trees)

    def biome_at(self, x: int, z: int) -> Biome:
        return self.biome

    def height_at(self, x: int, z: int, biome: Biome | None = None) -> int:
        return self.heights(x, z)

    def has_tree(self, x: int, z: int, biome: Biome) -> bool:
        return (x, z) in self.trees


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@dataclass
class RecordingConsumer:
    events: list[tuple[str, ChunkKey, tuple[MeshBatch, ...]]] = field(default_factory=list)

    def retire(self, chunk: ChunkKey, batches: tuple[MeshBatch, ...]) -> None:
        self.events.append(("retire", chunk, batches))

    def install(self, chunk: ChunkKey, batches: tuple[MeshBatch, ...]) -> None:
        self.events.append(("install", chunk, batches))


@dataclass
class Engine:
    store: VoxelStore
    terrain: TerrainGenerator
    scheduler: RebuildScheduler
    chunks: ChunkManager
    mesher: MeshBuilder
    consumer: RecordingConsumer
    rebuilt: list[ChunkKey]


def make_engine(terrain: TerrainGenerator | None = None, clock: Callable[[], float] | None = None) -> Engine:
    store = VoxelStore()
    terrain = terrain if terrain is not None else StubTerrain()
    rebuilt: list[ChunkKey] = []
    consumer = RecordingConsumer()
    holder: dict[str, MeshBuilder] = {}

    def rebuild(chunk: ChunkKey) -> None:
        rebuilt.append(chunk)
        holder["mesher"].rebuild_chunk(*chunk)

    scheduler = RebuildScheduler(rebuild, clock=clock) if clock is not None else RebuildScheduler(rebuild)
    chunks = ChunkManager(store, terrain, scheduler)
    mesher = MeshBuilder(store, chunks, consumer)
    holder["mesher"] = mesher
    return Engine(store, terrain, scheduler, chunks, mesher, consumer, rebuilt)


@pytest.fixture
def store() -> VoxelStore:
    return VoxelStore()


@pytest.fixture
def engine() -> Engine:
    return make_engine()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
