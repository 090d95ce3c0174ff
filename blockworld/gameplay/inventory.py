from blockworld.blocks import BlockType


class Inventory:
    """Collected block counts per type; the hotbar lists every type with a non-zero count."""

    def __init__(self) -> None:
        self.counts: dict[BlockType, int] = {block: 0 for block in BlockType}
        self._selected: BlockType | None = None

    def count(self, block: BlockType) -> int:
        return self.counts[block]

    def available(self) -> list[BlockType]:
        return [block for block in BlockType if self.counts[block] > 0]

    def add(self, block: BlockType | None, count: int = 1) -> None:
        if block is None:
            return
        self.counts[block] += count

    def remove(self, block: BlockType, count: int = 1) -> bool:
        if self.counts[block] < count:
            return False
        self.counts[block] -= count
        return True

    def selected_block(self) -> BlockType | None:
        # Selection falls back to the first collected type once the current one runs out.
        if self._selected is not None and self.counts[self._selected] > 0:
            return self._selected
        available = self.available()
        self._selected = available[0] if available else None
        return self._selected

    def selected_count(self) -> int:
        block = self.selected_block()
        return 0 if block is None else self.counts[block]

    def remove_selected(self, count: int = 1) -> BlockType | None:
        block = self.selected_block()
        if block is None or not self.remove(block, count):
            return None
        return block

    def select_index(self, index: int) -> bool:
        available = self.available()
        if index < 0 or index >= len(available):
            return False
        self._selected = available[index]
        return True

    def cycle(self, step: int) -> None:
        available = self.available()
        if not available:
            return
        current = self.selected_block()
        index = available.index(current) if current in available else 0
        self._selected = available[(index + step) % len(available)]
