"""Blocks: rigid groups of variables linked by active constraints.

The active constraints between a block's variables form a spanning tree.
Every variable sits at a fixed offset from the block position, so the block
moves as one unit to the weighted least-squares optimum of its members.

Tree walks use an explicit stack. Visiting order matches a recursive
depth-first walk (out-constraints before in-constraints, never stepping back
across the edge just arrived from), which decides ties between equal
Lagrangian multipliers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from vpsc.core.variable import Constraint, PositionStats, Variable

logger = logging.getLogger(__name__)


def _walk(
    start: Variable, prev: Optional[Variable] = None
) -> Iterator[Tuple[Variable, Constraint, Variable, bool]]:
    """Depth-first walk of the active constraint tree around start.

    Yields (parent, constraint, child, leaving). Every edge is yielded with
    leaving=False on the way down and again with leaving=True once the
    child's subtree is finished.
    """
    stack = [(start, None, start.active_neighbours(prev))]
    while stack:
        v, via, neighbours = stack[-1]
        step = next(neighbours, None)
        if step is not None:
            c, child = step
            yield v, c, child, False
            stack.append((child, c, child.active_neighbours(v)))
        else:
            stack.pop()
            if stack:
                yield stack[-1][0], via, v, True


@dataclass
class BlockSplit:
    """Result of splitting a block between two of its variables."""
    constraint: Constraint
    left: "Block"
    right: "Block"


class Block:
    """A maximal set of variables held together by active constraints.

    Attributes:
        vars: Member variables, in the order they joined
        posn: Optimal block position for the current offsets
        ps: Weighted sums behind posn
        block_ind: Index of this block in its Blocks partition
    """

    def __init__(self, v: Variable):
        self.vars: List[Variable] = []
        self.posn = 0.0
        self.block_ind = 0
        v.offset = 0.0
        self.ps = PositionStats(v.scale)
        self.add_variable(v)

    def __repr__(self) -> str:
        return f"Block(size={len(self.vars)}, posn={self.posn})"

    def add_variable(self, v: Variable) -> None:
        """Absorb v at its current offset."""
        v.block = self
        self.vars.append(v)
        self.ps.add_variable(v)
        self.posn = self.ps.get_posn()

    def update_weighted_position(self) -> None:
        """Move the block to where it minimises cost, recomputing from scratch."""
        self.ps.reset()
        for v in self.vars:
            self.ps.add_variable(v)
        self.posn = self.ps.get_posn()

    def _compute_lm(self, root: Variable) -> List[Constraint]:
        """Set c.lm on every active constraint reachable from root.

        Returns the constraints in the order their multipliers were settled
        (children before parents).
        """
        dfdv: Dict[Variable, float] = {}
        settled = []
        for parent, c, child, leaving in _walk(root):
            if not leaving:
                continue
            child_dfdv = dfdv.pop(child, None)
            if child_dfdv is None:
                child_dfdv = child.dfdv()
            child_dfdv /= child.scale
            parent_dfdv = dfdv.get(parent)
            if parent_dfdv is None:
                parent_dfdv = parent.dfdv()
            if child is c.right:
                dfdv[parent] = parent_dfdv + child_dfdv * c.left.scale
                c.lm = child_dfdv
            else:
                dfdv[parent] = parent_dfdv + child_dfdv * c.right.scale
                c.lm = -child_dfdv
            settled.append(c)
        return settled

    def traverse(
        self,
        visit: Callable[[Constraint], Any],
        v: Optional[Variable] = None,
        prev: Optional[Variable] = None,
    ) -> List[Any]:
        """Apply visit to each active constraint in the tree, parent before child."""
        start = v if v is not None else self.vars[0]
        return [visit(c) for _, c, _, leaving in _walk(start, prev) if not leaving]

    def find_min_lm(self) -> Optional[Constraint]:
        """Find the non-equality active constraint with the smallest multiplier.

        A multiplier below the Lagrangian tolerance marks a split candidate:
        relaxing that constraint would lower the block's cost.
        """
        m = None
        for c in self._compute_lm(self.vars[0]):
            if not c.equality and (m is None or c.lm < m.lm):
                m = c
        return m

    def _find_min_lm_between(self, lv: Variable, rv: Variable) -> Optional[Constraint]:
        self._compute_lm(lv)
        m = None
        for c, nxt in self._find_path(lv, rv):
            if not c.equality and c.right is nxt and (m is None or c.lm < m.lm):
                m = c
        return m

    def _find_path(self, v: Variable, to: Variable) -> List[Tuple[Constraint, Variable]]:
        """Edges on the tree path from v to to, listed from the to end backwards."""
        arrived_by: Dict[Variable, Tuple[Constraint, Variable]] = {}
        for parent, c, child, leaving in _walk(v):
            if leaving:
                continue
            arrived_by[child] = (c, parent)
            if child is to:
                break
        else:
            return []

        path = []
        node = to
        while node is not v:
            c, parent = arrived_by[node]
            path.append((c, node))
            node = parent
        return path

    def is_active_directed_path_between(self, u: Variable, v: Variable) -> bool:
        """Whether active out-constraints lead from u to v."""
        stack = [u]
        seen = set()
        while stack:
            w = stack.pop()
            if w is v:
                return True
            if w in seen:
                continue
            seen.add(w)
            for c in w.c_out:
                if c.active:
                    stack.append(c.right)
        return False

    @staticmethod
    def split(c: Constraint) -> List["Block"]:
        """Deactivate c and rebuild the blocks on either side of it."""
        c.active = False
        return [Block._create_split_block(c.left), Block._create_split_block(c.right)]

    @staticmethod
    def _create_split_block(start: Variable) -> "Block":
        b = Block(start)
        for parent, c, child, leaving in _walk(start):
            if leaving:
                continue
            child.offset = parent.offset + (c.gap if child is c.right else -c.gap)
            b.add_variable(child)
        return b

    def split_between(self, vl: Variable, vr: Variable) -> Optional[BlockSplit]:
        """Split at the smallest-multiplier constraint on the path from vl to vr.

        Returns None when no constraint on the path can be split, for
        example when the path is made only of equalities.
        """
        c = self._find_min_lm_between(vl, vr)
        if c is None:
            return None
        left, right = Block.split(c)
        return BlockSplit(constraint=c, left=left, right=right)

    def merge_across(self, b: "Block", c: Constraint, dist: float) -> None:
        """Activate c and absorb every variable of b, shifted by dist."""
        c.active = True
        for v in b.vars:
            v.offset += dist
            self.add_variable(v)
        self.posn = self.ps.get_posn()

    def cost(self) -> float:
        total = 0.0
        for v in self.vars:
            d = v.position() - v.desired_position
            total += d * d * v.weight
        return total
