"""Partition of all solver variables into blocks."""

import logging
from typing import Iterator, List

from vpsc.core.block import Block
from vpsc.core.variable import Constraint, Variable

logger = logging.getLogger(__name__)


class Blocks:
    """Every variable belongs to exactly one of these blocks.

    Blocks are kept in a list and each block remembers its index, so
    removal is O(1) by swapping the last block into the vacated slot.
    """

    def __init__(self, vs: List[Variable]):
        self.vs = vs
        self._list: List[Block] = []
        for v in vs:
            self.insert(Block(v))

    def __iter__(self) -> Iterator[Block]:
        return iter(self._list)

    def __len__(self) -> int:
        return len(self._list)

    def cost(self) -> float:
        return sum(b.cost() for b in self._list)

    def insert(self, b: Block) -> None:
        b.block_ind = len(self._list)
        self._list.append(b)

    def remove(self, b: Block) -> None:
        swap_block = self._list.pop()
        if b is not swap_block:
            self._list[b.block_ind] = swap_block
            swap_block.block_ind = b.block_ind

    def merge(self, c: Constraint) -> None:
        """Merge the blocks on either side of c, copying the smaller into the larger."""
        lb = c.left.block
        rb = c.right.block
        dist = c.right.offset - c.left.offset - c.gap
        if len(lb.vars) < len(rb.vars):
            rb.merge_across(lb, c, dist)
            self.remove(lb)
        else:
            lb.merge_across(rb, c, -dist)
            self.remove(rb)
        logger.debug(f"Merged blocks across {c!r}; {len(self._list)} blocks remain")

    def update_block_positions(self) -> None:
        """Re-optimise every block, e.g. after desired positions change."""
        for b in self._list:
            b.update_weighted_position()

    def split(self, inactive: List[Constraint], lagrangian_tolerance: float) -> None:
        """Split each block across its constraint with the smallest multiplier.

        Only blocks present when the call starts are examined. A block is
        split when that multiplier is below lagrangian_tolerance. Constraints
        that get deactivated are appended to inactive.
        """
        self.update_block_positions()
        for b in list(self._list):
            c = b.find_min_lm()
            if c is not None and c.lm < lagrangian_tolerance:
                for nb in Block.split(c):
                    self.insert(nb)
                self.remove(b)
                inactive.append(c)
                logger.debug(f"Split block across {c!r} (lm={c.lm:.6g})")
