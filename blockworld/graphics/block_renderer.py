from __future__ import annotations

import logging

import pyglet
from pyglet import gl

from blockworld.blocks import is_liquid
from blockworld.constants import ChunkKey
from blockworld.graphics.faces import VERTICES_PER_FACE, batch_colors, batch_vertices
from blockworld.graphics.mesher import MeshBatch


class LiquidGroup(pyglet.graphics.ShaderGroup):
    """Drawn after opaque geometry, without depth writes, so liquids blend over it."""

    def set_state(self) -> None:
        super().set_state()
        gl.glDepthMask(gl.GL_FALSE)

    def unset_state(self) -> None:
        gl.glDepthMask(gl.GL_TRUE)
        super().unset_state()


class ChunkRenderer:
    """Turns each chunk's mesh batches into pyglet vertex lists, one per batch."""

    def __init__(self) -> None:
        self.shader = pyglet.graphics.get_default_shader()
        self.batch = pyglet.graphics.Batch()
        self.opaque_group = pyglet.graphics.ShaderGroup(program=self.shader, order=0)
        self.liquid_group = LiquidGroup(program=self.shader, order=1)
        self._vertex_lists: dict[ChunkKey, list[pyglet.graphics.vertexdomain.VertexList]] = {}

    @property
    def draw_calls(self) -> int:
        return sum(len(lists) for lists in self._vertex_lists.values())

    def retire(self, chunk: ChunkKey, batches: tuple[MeshBatch, ...]) -> None:
        for vertex_list in self._vertex_lists.pop(chunk, []):
            vertex_list.delete()

    def install(self, chunk: ChunkKey, batches: tuple[MeshBatch, ...]) -> None:
        if chunk in self._vertex_lists:
            # The mesher retires before installing; anything left here is a wiring bug.
            logging.warning(f"Chunk {chunk} installed without retiring its previous batches")
            self.retire(chunk, ())

        vertex_lists = []
        for mesh_batch in batches:
            if not mesh_batch.positions:
                continue
            vertex_lists.append(
                self.shader.vertex_list(
                    len(mesh_batch.positions) * VERTICES_PER_FACE,
                    gl.GL_TRIANGLES,
                    batch=self.batch,
                    group=self.liquid_group if is_liquid(mesh_batch.block) else self.opaque_group,
                    position=("f/static", batch_vertices(mesh_batch)),
                    colors=("f/static", batch_colors(mesh_batch)),
                )
            )
        if vertex_lists:
            self._vertex_lists[chunk] = vertex_lists

    def draw(self) -> None:
        self.batch.draw()

    def delete(self) -> None:
        for chunk in list(self._vertex_lists):
            self.retire(chunk, ())
