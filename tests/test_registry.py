import pytest

from blockworld.blocks import (
    BLOCKS,
    BlockType,
    Gradient,
    get_block_color,
    is_liquid,
    material_for_face,
)
from blockworld.blocks.registry import load_block_definitions
from blockworld.constants import FaceDirection


def _write_blocks(tmp_path, overrides=None):
    files = {block.name.lower(): f"id={block.value}\ncolor=10,20,30\n" for block in BlockType}
    files.update(overrides or {})
    for name, text in files.items():
        (tmp_path / f"{name}.txt").write_text(text, encoding="utf-8")
    return tmp_path


def test_bundled_definitions_cover_every_block_type():
    assert set(BLOCKS) == set(BlockType)
    assert BLOCKS[BlockType.STONE].name == "Stone"


def test_only_water_is_liquid():
    assert is_liquid(BlockType.WATER)
    assert BLOCKS[BlockType.WATER].opacity == pytest.approx(0.6)
    assert not is_liquid(BlockType.STONE)
    assert not is_liquid(None)


def test_grass_is_a_two_band_gradient():
    appearance = BLOCKS[BlockType.GRASS].appearance

    assert isinstance(appearance, Gradient)
    assert appearance.split == pytest.approx(0.7)
    assert appearance.top == pytest.approx((34 / 255, 139 / 255, 34 / 255))
    assert get_block_color(BlockType.GRASS) == pytest.approx(appearance.blend())


def test_solid_color_is_scaled_from_bytes():
    assert get_block_color(BlockType.STONE) == pytest.approx((128 / 255,) * 3)


def test_face_materials():
    assert material_for_face(BlockType.GRASS, FaceDirection.PY) == "grass_top"
    assert material_for_face(BlockType.GRASS, FaceDirection.NY) == "grass_bottom"
    assert material_for_face(BlockType.GRASS, FaceDirection.NZ) == "grass_side"
    assert material_for_face(BlockType.DARK_GRASS, FaceDirection.PY) == "dark_grass"


def test_loader_accepts_a_complete_directory(tmp_path):
    definitions = load_block_definitions(_write_blocks(tmp_path, {"stone": "# comment\n\nid=2\ncolor=0.5,0.5,0.5\n"}))

    assert definitions[BlockType.STONE].appearance.color == (0.5, 0.5, 0.5)
    assert definitions[BlockType.STONE].name == "stone"


@pytest.mark.parametrize(
    "text, message",
    [
        ("color=1,2,3\n", "missing 'id'"),
        ("id=42\ncolor=1,2,3\n", "unknown block id"),
        ("id=2\n", "exactly one of"),
        ("id=2\ncolor=1,2,3\ngradient=1,2,3;4,5,6@0.5\n", "exactly one of"),
        ("id=2\ncolor=1,2\n", "3 comma-separated"),
        ("id=2\ngradient=1,2,3;4,5,6\n", "@<split>"),
        ("id=2\ngradient=1,2,3;4,5,6@1.5\n", "within [0, 1]"),
    ],
)
def test_loader_rejects_malformed_files(tmp_path, text, message):
    _write_blocks(tmp_path, {"stone": text})

    with pytest.raises(ValueError, match="stone.txt") as excinfo:
        load_block_definitions(tmp_path)
    assert message in str(excinfo.value)


def test_loader_rejects_duplicates_and_gaps(tmp_path):
    _write_blocks(tmp_path, {"extra": "id=2\ncolor=1,2,3\n"})
    with pytest.raises(ValueError, match="duplicate"):
        load_block_definitions(tmp_path)

    (tmp_path / "extra.txt").unlink()
    (tmp_path / "snow.txt").unlink()
    with pytest.raises(ValueError, match="SNOW"):
        load_block_definitions(tmp_path)
