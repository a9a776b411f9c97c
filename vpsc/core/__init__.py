"""
Core Layer - Active-set solver for one-dimensional separation constraints

Modules:
- variable: Variable, Constraint and the PositionStats accumulator
- block: Block, a rigid group of variables joined by active constraints
- blocks: Blocks, the partition of all variables into blocks
- solver: Solver, the satisfy/split driver
"""

from .variable import (
    Constraint,
    PositionStats,
    UnassignedVariableError,
    Variable,
)
from .block import Block, BlockSplit
from .blocks import Blocks
from .solver import Solver

__all__ = [
    # Primitives
    'Constraint',
    'PositionStats',
    'UnassignedVariableError',
    'Variable',
    # Blocks
    'Block',
    'BlockSplit',
    'Blocks',
    # Solver
    'Solver',
]
