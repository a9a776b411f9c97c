"""Variable placement with separation constraints.

A one-dimensional active-set solver that keeps variables as close as
possible to their desired positions while honouring separation constraints
of the form ``scale_r * x_r - scale_l * x_l >= gap``. Layout code runs it
once per axis to remove overlap between boxes.

This package provides:
- Solver primitives (Variable, Constraint, Block, Blocks, Solver)
- One-dimensional overlap removal for ordered spans
- A networkx bridge for custom constraint graphs
"""

from vpsc.core import (
    Block,
    Blocks,
    Constraint,
    PositionStats,
    Solver,
    UnassignedVariableError,
    Variable,
)
from vpsc.layout.overlap import remove_overlap_in_one_dimension
from vpsc.models.spans import OverlapRemovalResult, Span

__version__ = "0.1.0"

__all__ = [
    "Block",
    "Blocks",
    "Constraint",
    "OverlapRemovalResult",
    "PositionStats",
    "Solver",
    "Span",
    "UnassignedVariableError",
    "Variable",
    "remove_overlap_in_one_dimension",
]
