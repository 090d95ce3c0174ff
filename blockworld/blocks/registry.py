from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from blockworld.constants import FaceDirection


class BlockType(IntEnum):
    DIRT = 0
    GRASS = 1
    STONE = 2
    WOOD = 3
    SAND = 4
    WATER = 5
    SNOW = 6
    DARK_GRASS = 7


Color = tuple[float, float, float]


@dataclass(frozen=True)
class SolidColor:
    color: Color


@dataclass(frozen=True)
class Gradient:
    """Two-band vertical gradient; ``split`` is the top band's share of the block height."""

    top: Color
    bottom: Color
    split: float

    def blend(self) -> Color:
        s = self.split
        return tuple(t * s + b * (1.0 - s) for t, b in zip(self.top, self.bottom))  # type: ignore[return-value]


Appearance = SolidColor | Gradient


@dataclass(frozen=True)
class BlockDefinition:
    block: BlockType
    name: str
    appearance: Appearance
    liquid: bool = False
    opacity: float = 1.0


DATA_DIR = Path(__file__).resolve().parent / "data"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_color(value: str) -> Color:
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 3:
        raise ValueError("color must have 3 comma-separated components")

    raw = [float(p) for p in parts]
    if any(c > 1.0 for c in raw):
        raw = [c / 255.0 for c in raw]

    return tuple(max(0.0, min(1.0, c)) for c in raw)  # type: ignore[return-value]


def _parse_gradient(value: str) -> Gradient:
    colors, sep, split = value.partition("@")
    if not sep:
        raise ValueError("gradient must end with '@<split>'")
    top, sep, bottom = colors.partition(";")
    if not sep:
        raise ValueError("gradient must have two ';'-separated colors")
    split_value = float(split)
    if not 0.0 <= split_value <= 1.0:
        raise ValueError("gradient split must be within [0, 1]")
    return Gradient(top=_parse_color(top), bottom=_parse_color(bottom), split=split_value)


def _load_block_file(path: Path) -> BlockDefinition:
    data: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip().lower()] = value.strip()

    if "id" not in data:
        raise ValueError(f"{path.name}: missing 'id'")
    try:
        block = BlockType(int(data["id"]))
    except ValueError as exc:
        raise ValueError(f"{path.name}: unknown block id {data['id']!r}") from exc

    if ("color" in data) == ("gradient" in data):
        raise ValueError(f"{path.name}: exactly one of 'color' or 'gradient' is required")
    try:
        if "color" in data:
            appearance: Appearance = SolidColor(_parse_color(data["color"]))
        else:
            appearance = _parse_gradient(data["gradient"])
        opacity = float(data.get("opacity", "1.0"))
    except ValueError as exc:
        raise ValueError(f"{path.name}: {exc}") from exc

    return BlockDefinition(
        block=block,
        name=data.get("name", path.stem),
        appearance=appearance,
        liquid=_parse_bool(data.get("liquid", "false")),
        opacity=max(0.0, min(1.0, opacity)),
    )


def load_block_definitions(data_dir: Path = DATA_DIR) -> dict[BlockType, BlockDefinition]:
    definitions: dict[BlockType, BlockDefinition] = {}
    for path in sorted(data_dir.glob("*.txt")):
        definition = _load_block_file(path)
        if definition.block in definitions:
            raise ValueError(f"{path.name}: duplicate definition for {definition.block.name}")
        definitions[definition.block] = definition

    missing = [block.name for block in BlockType if block not in definitions]
    if missing:
        raise ValueError(f"no block definition for: {', '.join(missing)}")
    logging.info(f"Loaded {len(definitions)} block definitions from {data_dir}")
    return definitions


BLOCKS = load_block_definitions()
LIQUID_BLOCKS = frozenset(block for block, definition in BLOCKS.items() if definition.liquid)


def get_block_definition(block: BlockType) -> BlockDefinition:
    return BLOCKS[block]


def get_block_color(block: BlockType) -> Color:
    appearance = BLOCKS[block].appearance
    if isinstance(appearance, Gradient):
        return appearance.blend()
    return appearance.color


def is_liquid(block: BlockType | None) -> bool:
    return block in LIQUID_BLOCKS


def material_for_face(block: BlockType, face: FaceDirection) -> str:
    # Grass picks a top/bottom/side variant; every other block has one material.
    name = block.name.lower()
    if block is not BlockType.GRASS:
        return name
    if face is FaceDirection.PY:
        return f"{name}_top"
    if face is FaceDirection.NY:
        return f"{name}_bottom"
    return f"{name}_side"
