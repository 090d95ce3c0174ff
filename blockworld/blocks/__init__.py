from blockworld.blocks.registry import (
    BLOCKS,
    LIQUID_BLOCKS,
    BlockDefinition,
    BlockType,
    Gradient,
    SolidColor,
    get_block_color,
    get_block_definition,
    is_liquid,
    material_for_face,
)

__all__ = [
    "BlockDefinition",
    "BlockType",
    "BLOCKS",
    "Gradient",
    "LIQUID_BLOCKS",
    "SolidColor",
    "get_block_color",
    "get_block_definition",
    "is_liquid",
    "material_for_face",
]
