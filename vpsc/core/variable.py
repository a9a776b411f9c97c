"""Solver primitives: variables, separation constraints and block statistics.

A Variable is a position unknown with a desired value. A Constraint ties two
variables together with a minimum separation:

    scale_r * x_r - scale_l * x_l >= gap    (or == gap for equalities)

Variables are owned by exactly one Block at a time. Their position is
derived from the block's position and the variable's offset inside it.
"""

import math
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from vpsc.core.block import Block


class UnassignedVariableError(Exception):
    """Raised when a variable's position is read before it belongs to a block."""

    def __init__(self, variable: "Variable"):
        self.variable = variable
        super().__init__(
            f"{variable!r} has no block; run Solver.satisfy() or Solver.solve() first"
        )


class PositionStats:
    """Running weighted sums for the optimal position of a block.

    For variables tied to a common block position p by fixed offsets b_i,
    the block cost sum(w_i * (a_i * p + b_i - d_i)^2) is minimised at
    p = (AD - AB) / A2.
    """

    def __init__(self, scale: float):
        self.scale = scale
        self.AB = 0.0
        self.AD = 0.0
        self.A2 = 0.0

    def add_variable(self, v: "Variable") -> None:
        ai = self.scale / v.scale
        bi = v.offset / v.scale
        wi = v.weight
        self.AB += wi * ai * bi
        self.AD += wi * ai * v.desired_position
        self.A2 += wi * ai * ai

    def reset(self) -> None:
        self.AB = self.AD = self.A2 = 0.0

    def get_posn(self) -> float:
        return (self.AD - self.AB) / self.A2


class Variable:
    """A position unknown.

    Attributes:
        desired_position: Where the caller would like the variable to be
        weight: Importance of staying near the desired position
        scale: Scale factor applied in constraints
        offset: Offset from the owning block's position
        block: Owning block (None until the solver builds blocks)
        c_in: Constraints with this variable on the right
        c_out: Constraints with this variable on the left
    """

    def __init__(self, desired_position: float, weight: float = 1.0, scale: float = 1.0):
        self.desired_position = desired_position
        self.weight = weight
        self.scale = scale
        self.offset = 0.0
        self.block: Optional["Block"] = None
        self.c_in: List["Constraint"] = []
        self.c_out: List["Constraint"] = []

    def __repr__(self) -> str:
        return (
            f"Variable(desired_position={self.desired_position}, "
            f"weight={self.weight}, scale={self.scale})"
        )

    def dfdv(self) -> float:
        """Derivative of this variable's cost term with respect to its position."""
        return 2.0 * self.weight * (self.position() - self.desired_position)

    def position(self) -> float:
        """Current position, derived from the owning block.

        Raises:
            UnassignedVariableError: If the variable has no block yet
        """
        if self.block is None:
            raise UnassignedVariableError(self)
        return (self.block.ps.scale * self.block.posn + self.offset) / self.scale

    def active_neighbours(
        self, prev: Optional["Variable"] = None
    ) -> Iterator[Tuple["Constraint", "Variable"]]:
        """Yield (constraint, neighbour) over active constraints, skipping prev.

        Out-constraints come first, then in-constraints, each in insertion order.
        """
        for c in self.c_out:
            if c.active and c.right is not prev:
                yield c, c.right
        for c in self.c_in:
            if c.active and c.left is not prev:
                yield c, c.left


class Constraint:
    """Separation constraint: right.scale * right - left.scale * left >= gap.

    Attributes:
        left: Lower variable
        right: Upper variable
        gap: Minimum separation (may be negative)
        equality: Whether the separation must be exactly gap
        active: Whether the constraint is in some block's spanning tree
        lm: Lagrangian multiplier from the most recent computation
        unsatisfiable: Set permanently when the constraint would close an active cycle
    """

    def __init__(self, left: Variable, right: Variable, gap: float, equality: bool = False):
        self.left = left
        self.right = right
        self.gap = gap
        self.equality = equality
        self.active = False
        self.lm = 0.0
        self.unsatisfiable = False

    def __repr__(self) -> str:
        op = "==" if self.equality else ">="
        return f"Constraint({self.left!r} + {self.gap} {op} {self.right!r})"

    def slack(self) -> float:
        """Signed margin by which the constraint holds; negative means violated.

        Unsatisfiable constraints report infinite slack so they are never
        selected again.
        """
        if self.unsatisfiable:
            return math.inf
        return (
            self.right.scale * self.right.position()
            - self.gap
            - self.left.scale * self.left.position()
        )
