from __future__ import annotations

import math
import random
from enum import Enum
from typing import TYPE_CHECKING

from blockworld.blocks import BlockType
from blockworld.constants import CHUNK_SIZE, Vec3

if TYPE_CHECKING:
    from blockworld.world.store import VoxelStore


class Biome(Enum):
    SNOW = "snow"
    DESERT = "desert"
    PLAINS = "plains"
    FOREST = "forest"
    GRASSLAND = "grassland"


SURFACE_BLOCKS = {
    Biome.SNOW: BlockType.SNOW,
    Biome.DESERT: BlockType.SAND,
    Biome.PLAINS: BlockType.GRASS,
    Biome.FOREST: BlockType.DARK_GRASS,
    Biome.GRASSLAND: BlockType.GRASS,
}

HEIGHT_OFFSETS = {
    Biome.SNOW: 3,
    Biome.DESERT: -2,
}


class TerrainGenerator:
    BASE_HEIGHT = 10
    HEIGHT_AMPLITUDE = 5.0
    HEIGHT_SCALE = 16.0
    CLIMATE_SCALE = 96.0
    SUBSURFACE_DEPTH = 3
    TREE_CHANCE = 0.03
    TRUNK_HEIGHT = 4
    # Offsets that decorrelate the climate fields from each other and from height.
    MOISTURE_OFFSET = 1000.0
    HEIGHT_OFFSET = -2000.0

    def __init__(
        self,
        seed: int,
        octaves: int = 3,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ) -> None:
        self.seed = seed
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity

        rng = random.Random(seed)
        permutation = list(range(256))
        rng.shuffle(permutation)
        self._perm = permutation + permutation

    @staticmethod
    def _fade(t: float) -> float:
        return t * t * t * (t * (t * 6 - 15) + 10)

    @staticmethod
    def _lerp(a: float, b: float, t: float) -> float:
        return a + t * (b - a)

    @staticmethod
    def _grad(hash_value: int, x: float, y: float) -> float:
        h = hash_value & 7
        u = x if h < 4 else y
        v = y if h < 4 else x
        return ((u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v))

    def _perlin(self, x: float, y: float) -> float:
        xi = math.floor(x) & 255
        yi = math.floor(y) & 255
        xf = x - math.floor(x)
        yf = y - math.floor(y)

        u = self._fade(xf)
        v = self._fade(yf)

        aa = self._perm[self._perm[xi] + yi]
        ab = self._perm[self._perm[xi] + yi + 1]
        ba = self._perm[self._perm[xi + 1] + yi]
        bb = self._perm[self._perm[xi + 1] + yi + 1]

        x1 = self._lerp(self._grad(aa, xf, yf), self._grad(ba, xf - 1.0, yf), u)
        x2 = self._lerp(self._grad(ab, xf, yf - 1.0), self._grad(bb, xf - 1.0, yf - 1.0), u)
        return self._lerp(x1, x2, v)

    def noise(self, x: float, z: float, scale: float) -> float:
        """Fractal noise normalized to roughly [-1, 1]."""
        frequency = 1.0 / scale
        amplitude = 1.0
        noise_sum = 0.0
        max_amplitude = 0.0

        for _ in range(self.octaves):
            noise_sum += self._perlin(x * frequency, z * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        return noise_sum / max_amplitude if max_amplitude else 0.0

    def climate_at(self, x: int, z: int) -> tuple[float, float]:
        temperature = self.noise(x, z, self.CLIMATE_SCALE)
        moisture = self.noise(x + self.MOISTURE_OFFSET, z + self.MOISTURE_OFFSET, self.CLIMATE_SCALE)
        return temperature, moisture

    def biome_at(self, x: int, z: int) -> Biome:
        temperature, moisture = self.climate_at(x, z)
        return self.classify(temperature, moisture)

    @staticmethod
    def classify(temperature: float, moisture: float) -> Biome:
        # First matching row wins.
        if temperature < -0.3:
            return Biome.SNOW
        if temperature > 0.4 and moisture < -0.2:
            return Biome.DESERT
        if moisture < -0.3:
            return Biome.PLAINS
        if moisture > 0.3:
            return Biome.FOREST
        return Biome.GRASSLAND

    def height_at(self, x: int, z: int, biome: Biome | None = None) -> int:
        if biome is None:
            biome = self.biome_at(x, z)
        base = self.noise(x + self.HEIGHT_OFFSET, z + self.HEIGHT_OFFSET, self.HEIGHT_SCALE)
        height = self.BASE_HEIGHT + base * self.HEIGHT_AMPLITUDE + HEIGHT_OFFSETS.get(biome, 0)
        return math.floor(height)

    def block_at_depth(self, biome: Biome, y: int, height: int) -> BlockType:
        if y == height:
            return SURFACE_BLOCKS[biome]
        if y >= height - self.SUBSURFACE_DEPTH:
            return BlockType.SAND if biome is Biome.DESERT else BlockType.DIRT
        return BlockType.STONE

    def column_random(self, x: int, z: int) -> float:
        return random.Random(f"{self.seed}:{x}:{z}").random()

    def has_tree(self, x: int, z: int, biome: Biome) -> bool:
        return biome is Biome.FOREST and self.column_random(x, z) < self.TREE_CHANCE

    def tree_blocks(self, x: int, z: int, height: int) -> list[tuple[Vec3, BlockType]]:
        """Trunk column plus a cross-shaped cap; the cap may reach into a neighboring chunk."""
        top = height + self.TRUNK_HEIGHT
        blocks = [((x, height + ty, z), BlockType.WOOD) for ty in range(1, self.TRUNK_HEIGHT + 1)]
        blocks.append(((x, top + 1, z), BlockType.DARK_GRASS))
        for dx, dz in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            blocks.append(((x + dx, top, z + dz), BlockType.DARK_GRASS))
        return blocks

    def populate_chunk(self, store: VoxelStore, cx: int, cz: int, chunk_size: int = CHUNK_SIZE) -> int:
        """Write one chunk's columns into ``store``; returns the number of writes accepted."""
        written = 0
        x0 = cx * chunk_size
        z0 = cz * chunk_size
        for x in range(x0, x0 + chunk_size):
            for z in range(z0, z0 + chunk_size):
                biome = self.biome_at(x, z)
                height = self.height_at(x, z, biome)
                for y in range(0, height + 1):
                    if store.set(x, y, z, self.block_at_depth(biome, y, height)):
                        written += 1
                if self.has_tree(x, z, biome):
                    for (bx, by, bz), block in self.tree_blocks(x, z, height):
                        if store.set(bx, by, bz, block):
                            written += 1
        return written
