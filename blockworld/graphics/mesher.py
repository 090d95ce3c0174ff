from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from blockworld.blocks import BlockType, is_liquid, material_for_face
from blockworld.constants import FACE_DIRECTIONS, ChunkKey, FaceDirection, Vec3
from blockworld.world.chunks import ChunkManager
from blockworld.world.store import VoxelStore


@dataclass(frozen=True)
class MeshBatch:
    """Every visible occurrence of one face of one block type; drawn as one vertex list, one draw call."""

    block: BlockType
    face: FaceDirection
    material: str
    positions: tuple[Vec3, ...]


class BatchConsumer(Protocol):
    def retire(self, chunk: ChunkKey, batches: tuple[MeshBatch, ...]) -> None: ...

    def install(self, chunk: ChunkKey, batches: tuple[MeshBatch, ...]) -> None: ...


class MeshBuilder:
    def __init__(self, store: VoxelStore, chunks: ChunkManager, consumer: BatchConsumer | None = None) -> None:
        self.store = store
        self.chunks = chunks
        self.consumer = consumer
        self._meshes: dict[ChunkKey, tuple[MeshBatch, ...]] = {}

    def batches_for(self, chunk: ChunkKey) -> tuple[MeshBatch, ...]:
        return self._meshes.get(chunk, ())

    def meshed_chunks(self) -> list[ChunkKey]:
        return list(self._meshes)

    def face_visible(self, x: int, y: int, z: int, face: FaceDirection) -> bool:
        # Liquid neighbors keep the face so both sides of a solid/liquid boundary render.
        dx, dy, dz = face.offset
        neighbor = self.store.get(x + dx, y + dy, z + dz)
        return neighbor is None or is_liquid(neighbor)

    def build_batches(self, cx: int, cz: int) -> tuple[MeshBatch, ...]:
        faces: dict[tuple[BlockType, FaceDirection], list[Vec3]] = {}
        for (x, y, z), block in self.store.iter_chunk(cx, cz):
            for face in FACE_DIRECTIONS:
                if self.face_visible(x, y, z, face):
                    faces.setdefault((block, face), []).append((x, y, z))

        face_order = {face: index for index, face in enumerate(FACE_DIRECTIONS)}
        return tuple(
            MeshBatch(block=block, face=face, material=material_for_face(block, face), positions=tuple(positions))
            for (block, face), positions in sorted(faces.items(), key=lambda item: (item[0][0], face_order[item[0][1]]))
        )

    def rebuild_chunk(self, cx: int, cz: int) -> tuple[MeshBatch, ...]:
        chunk = (cx, cz)
        self.chunks.require(chunk)
        batches = self.build_batches(cx, cz)

        old = self._meshes.pop(chunk, None)
        if old is not None and self.consumer is not None:
            self.consumer.retire(chunk, old)
        self._meshes[chunk] = batches
        if self.consumer is not None:
            self.consumer.install(chunk, batches)
        self.chunks.mark_meshed(chunk)

        logging.debug(
            f"Rebuilt chunk {chunk}: {sum(len(b.positions) for b in batches)} faces in {len(batches)} batches"
        )
        return batches
