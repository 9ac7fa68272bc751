"""Unit tests for PackerArena."""

import pytest

from cutplan.domain import Bin, Box, PackingOptions, Signature
from cutplan.infrastructure import Packer, PackerArena


def _packer(signature: Signature, previous: int | None = None) -> Packer:
    packer = Packer(signature, PackingOptions(), [Bin(10, 10, index=0)], [Box(1, 1)])
    packer.previous_index = previous
    return packer


class TestPackerArena:
    """Tests for PackerArena."""

    def test_add_assigns_increasing_indices(self, plain_signature: Signature) -> None:
        arena = PackerArena()
        first, second = _packer(plain_signature), _packer(plain_signature)
        assert arena.add(first) == 0
        assert arena.add(second) == 1
        assert (first.index, second.index) == (0, 1)
        assert len(arena) == 2
        assert 1 in arena

    def test_chain_is_root_first(self, plain_signature: Signature) -> None:
        arena = PackerArena()
        root = _packer(plain_signature)
        arena.add(root)
        middle = _packer(plain_signature, previous=root.index)
        arena.add(middle)
        leaf = _packer(plain_signature, previous=middle.index)
        arena.add(leaf)
        assert arena.chain(leaf.index) == [root, middle, leaf]
        assert arena.chain(root.index) == [root]

    def test_retain_keeps_ancestors(self, plain_signature: Signature) -> None:
        arena = PackerArena()
        root, other = _packer(plain_signature), _packer(plain_signature)
        arena.add(root)
        arena.add(other)
        child = _packer(plain_signature, previous=root.index)
        arena.add(child)

        arena.retain([child.index])
        assert len(arena) == 2
        assert root.index in arena
        assert other.index not in arena

    def test_put_replaces_record(self, plain_signature: Signature) -> None:
        arena = PackerArena()
        packer = _packer(plain_signature)
        arena.add(packer)
        copy = packer.ranked(1, 1)
        arena.put(copy)
        assert arena.get(packer.index) is copy

    def test_put_unknown_slot(self, plain_signature: Signature) -> None:
        arena = PackerArena()
        packer = _packer(plain_signature)
        packer.index = 7
        with pytest.raises(KeyError):
            arena.put(packer)
