import pytest

from blockworld.blocks import BlockType
from blockworld.physics.collision import overlaps_cell, resolve


@pytest.fixture
def floor_block(store):
    store.set(0, 10, 0, BlockType.STONE)
    return store


def test_falling_body_lands_on_top_of_the_voxel(floor_block):
    result = resolve(floor_block, (0.5, 11.2, 0.5), (0.0, -3.0, 0.0), (0.5, 11.05, 0.5))

    assert result.position == (0.5, 11, 0.5)
    assert result.velocity[1] == 0
    assert result.on_ground


def test_body_high_above_the_ground_keeps_falling(floor_block):
    result = resolve(floor_block, (0.5, 13.0, 0.5), (0.0, -3.0, 0.0), (0.5, 12.95, 0.5))

    assert result.position == (0.5, 12.95, 0.5)
    assert result.velocity == (0.0, -3.0, 0.0)
    assert not result.on_ground


def test_rising_body_is_never_grounded(floor_block):
    result = resolve(floor_block, (0.5, 11.0, 0.5), (0.0, 1.0, 0.0), (0.5, 11.02, 0.5))

    assert result.position == (0.5, 11.02, 0.5)
    assert result.velocity[1] == 1.0
    assert not result.on_ground


def test_ceiling_stops_upward_velocity_without_moving_the_body(floor_block):
    floor_block.set(0, 13, 0, BlockType.STONE)

    result = resolve(floor_block, (0.5, 11.0, 0.5), (0.0, 5.0, 0.0), (0.5, 11.2, 0.5))

    assert result.position == (0.5, 11.2, 0.5)
    assert result.velocity[1] == 0
    assert not result.on_ground


def test_wall_blocks_x_but_body_slides_along_z(store):
    store.set(1, 10, 0, BlockType.STONE)
    store.set(2, 11, 0, BlockType.STONE)
    store.set(2, 12, 0, BlockType.STONE)

    result = resolve(store, (1.7, 11.0, 0.5), (3.0, 0.0, 1.0), (1.8, 11.0, 0.6))

    assert result.position == (1.7, 11, 0.6)
    assert result.on_ground


def test_wall_above_head_height_does_not_block(store):
    store.set(2, 13, 0, BlockType.STONE)

    result = resolve(store, (1.7, 11.0, 0.5), (3.0, 0.0, 0.0), (1.8, 11.0, 0.5))

    assert result.position[0] == 1.8


def test_negative_x_wall_uses_the_trailing_edge(store):
    store.set(-1, 11, 0, BlockType.STONE)

    result = resolve(store, (0.3, 11.0, 0.5), (-3.0, 0.0, 0.0), (0.2, 11.0, 0.5))

    assert result.position[0] == 0.3


def test_fast_body_passes_through_a_thin_wall(store):
    # Only the cell at the leading edge of the destination is tested.
    store.set(2, 11, 0, BlockType.STONE)
    store.set(2, 12, 0, BlockType.STONE)

    result = resolve(store, (1.5, 11.0, 0.5), (144.0, 0.0, 0.0), (3.9, 11.0, 0.5))

    assert result.position[0] == 3.9


def test_water_counts_as_solid(store):
    store.set(0, 10, 0, BlockType.WATER)

    result = resolve(store, (0.5, 11.2, 0.5), (0.0, -3.0, 0.0), (0.5, 11.05, 0.5))

    assert result.on_ground


@pytest.mark.parametrize(
    "cell, expected",
    [
        ((0, 11, 0), True),
        ((0, 12, 0), True),
        ((0, 13, 0), False),
        ((0, 10, 0), False),
        ((1, 11, 0), False),
        ((-1, 11, 0), False),
        ((0, 11, 1), False),
    ],
)
def test_overlap_uses_the_unit_cell_extent(cell, expected):
    assert overlaps_cell((0.5, 11.0, 0.5), cell) is expected


def test_overlap_near_a_cell_edge():
    assert overlaps_cell((0.8, 11.0, 0.5), (1, 11, 0))
