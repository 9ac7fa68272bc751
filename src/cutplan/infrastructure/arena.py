"""Index-addressed storage of the packer search tree.

Packers refer to their predecessor by arena slot instead of holding it,
so pruning a losing branch is a matter of dropping slots.
"""

from __future__ import annotations

from typing import Iterable

from cutplan.infrastructure.packer import Packer


class PackerArena:
    """Slots of packers, keyed by a monotonically increasing index."""

    def __init__(self) -> None:
        self._slots: dict[int, Packer] = {}
        self._next_index = 0

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, index: int) -> bool:
        return index in self._slots

    def add(self, packer: Packer) -> int:
        """Store a new packer and return its slot index."""
        index = self._next_index
        self._next_index += 1
        packer.index = index
        self._slots[index] = packer
        return index

    def put(self, packer: Packer) -> None:
        """Replace the record stored in an existing slot.

        Raises:
            KeyError: If the packer's slot is not in the arena.
        """
        if packer.index not in self._slots:
            raise KeyError(packer.index)
        self._slots[packer.index] = packer

    def get(self, index: int) -> Packer:
        return self._slots[index]

    def chain(self, index: int) -> list[Packer]:
        """Packers from the stage 0 root down to the given slot."""
        chain: list[Packer] = []
        current: int | None = index
        while current is not None:
            packer = self._slots[current]
            chain.append(packer)
            current = packer.previous_index
        chain.reverse()
        return chain

    def retain(self, indices: Iterable[int]) -> None:
        """Drop every slot not on the chain of one of the given slots."""
        keep: set[int] = set()
        for index in indices:
            current: int | None = index
            while current is not None and current not in keep:
                keep.add(current)
                current = self._slots[current].previous_index
        self._slots = {i: p for i, p in self._slots.items() if i in keep}
