import pytest

from blockworld.blocks import BlockType
from blockworld.world.store import VoxelStore
from blockworld.world.terrain import Biome, TerrainGenerator


@pytest.mark.parametrize(
    "temperature, moisture, expected",
    [
        (-0.5, 0.0, Biome.SNOW),
        (-0.5, -0.9, Biome.SNOW),
        (0.6, -0.5, Biome.DESERT),
        (0.6, -0.1, Biome.GRASSLAND),
        (0.0, -0.4, Biome.PLAINS),
        (0.0, 0.5, Biome.FOREST),
        (0.6, 0.5, Biome.FOREST),
        (0.0, 0.0, Biome.GRASSLAND),
    ],
)
def test_biome_table_is_checked_in_order(temperature, moisture, expected):
    assert TerrainGenerator.classify(temperature, moisture) is expected


def test_column_layers_follow_biome():
    terrain = TerrainGenerator(seed=1)

    assert terrain.block_at_depth(Biome.SNOW, 12, 12) is BlockType.SNOW
    assert terrain.block_at_depth(Biome.GRASSLAND, 11, 12) is BlockType.DIRT
    assert terrain.block_at_depth(Biome.GRASSLAND, 9, 12) is BlockType.DIRT
    assert terrain.block_at_depth(Biome.GRASSLAND, 8, 12) is BlockType.STONE
    assert terrain.block_at_depth(Biome.DESERT, 12, 12) is BlockType.SAND
    assert terrain.block_at_depth(Biome.DESERT, 10, 12) is BlockType.SAND
    assert terrain.block_at_depth(Biome.DESERT, 0, 12) is BlockType.STONE
    assert terrain.block_at_depth(Biome.FOREST, 12, 12) is BlockType.DARK_GRASS


def test_tree_is_a_trunk_with_a_cross_cap():
    terrain = TerrainGenerator(seed=1)

    blocks = dict(terrain.tree_blocks(4, 4, 10))

    trunk = [pos for pos, block in blocks.items() if block is BlockType.WOOD]
    leaves = {pos for pos, block in blocks.items() if block is BlockType.DARK_GRASS}
    assert sorted(trunk) == [(4, 11, 4), (4, 12, 4), (4, 13, 4), (4, 14, 4)]
    assert leaves == {(4, 15, 4), (5, 14, 4), (3, 14, 4), (4, 14, 5), (4, 14, 3)}


def test_same_seed_gives_same_terrain():
    a = TerrainGenerator(seed=42)
    b = TerrainGenerator(seed=42)

    for x in range(-20, 20, 3):
        for z in range(-20, 20, 3):
            assert a.biome_at(x, z) is b.biome_at(x, z)
            assert a.height_at(x, z) == b.height_at(x, z)
            assert a.column_random(x, z) == b.column_random(x, z)


def test_chunk_population_is_deterministic():
    first, second = VoxelStore(), VoxelStore()

    TerrainGenerator(seed=7).populate_chunk(first, 1, -2)
    TerrainGenerator(seed=7).populate_chunk(second, 1, -2)

    assert first.chunk_snapshot(1, -2) == second.chunk_snapshot(1, -2)
    assert len(first) == len(second) > 0


def test_different_seeds_change_the_heightmap():
    a = TerrainGenerator(seed=1)
    b = TerrainGenerator(seed=2)

    heights_a = [a.height_at(x, z) for x in range(32) for z in range(32)]
    heights_b = [b.height_at(x, z) for x in range(32) for z in range(32)]

    assert heights_a != heights_b


def test_heights_stay_inside_the_biome_band():
    terrain = TerrainGenerator(seed=3)

    for x in range(-64, 64, 5):
        for z in range(-64, 64, 5):
            assert 2 <= terrain.height_at(x, z) <= 18


def test_populated_column_is_solid_up_to_the_surface():
    terrain = TerrainGenerator(seed=11)
    store = VoxelStore()
    terrain.populate_chunk(store, 0, 0)

    for x, z in ((0, 0), (7, 3), (15, 15)):
        biome = terrain.biome_at(x, z)
        height = terrain.height_at(x, z)
        assert all(store.get(x, y, z) is not None for y in range(height + 1))
        near_tree = any(
            terrain.has_tree(x + dx, z + dz, terrain.biome_at(x + dx, z + dz))
            for dx in (-1, 0, 1)
            for dz in (-1, 0, 1)
        )
        if not near_tree:
            assert store.get(x, height, z) is terrain.block_at_depth(biome, height, height)


def test_noise_is_smooth_between_neighbors():
    terrain = TerrainGenerator(seed=5)

    for x in range(0, 40):
        assert abs(terrain.noise(x, 0, terrain.HEIGHT_SCALE) - terrain.noise(x + 1, 0, terrain.HEIGHT_SCALE)) < 0.5
