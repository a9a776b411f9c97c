"""Bridge between networkx constraint graphs and solver primitives.

Layout code often describes ordering and alignment as a directed graph:
an edge u -> v with gap g means "v is at least g after u". These helpers
turn such a graph into Variables and Constraints, and snapshot solver state
back into a graph for inspection.

Node attributes read: desired_position (default 0.0), weight (1.0), scale (1.0)
Edge attributes read: gap (default 0.0), equality (False)
"""

import logging
from typing import Any, Dict, Hashable, List, Sequence, Tuple

import networkx as nx

from vpsc.core.solver import Solver
from vpsc.core.variable import Constraint, Variable

logger = logging.getLogger(__name__)


def graph_to_problem(graph: nx.DiGraph) -> Tuple[Dict[Hashable, Variable], List[Constraint]]:
    """Build variables and constraints from a directed constraint graph.

    Args:
        graph: Directed graph (DiGraph or MultiDiGraph)

    Returns:
        Tuple of (node -> Variable in node order, constraints in edge order)

    Raises:
        ValueError: If the graph is undirected
    """
    if not graph.is_directed():
        raise ValueError(
            "Constraint graph must be directed: edge u -> v places v after u"
        )

    variables: Dict[Hashable, Variable] = {}
    for node, data in graph.nodes(data=True):
        variables[node] = Variable(
            data.get("desired_position", 0.0),
            data.get("weight", 1.0),
            data.get("scale", 1.0),
        )

    constraints = [
        Constraint(
            variables[u],
            variables[v],
            data.get("gap", 0.0),
            data.get("equality", False),
        )
        for u, v, data in graph.edges(data=True)
    ]

    logger.debug(
        f"Built {len(variables)} variables and {len(constraints)} constraints from graph"
    )
    return variables, constraints


def problem_to_graph(
    variables: Sequence[Variable], constraints: Sequence[Constraint]
) -> nx.MultiDiGraph:
    """Snapshot variables and constraints as a graph.

    Nodes are variable indices. Edge keys are constraint indices. Positions,
    block indices and slacks are None until the solver has built blocks.

    Raises:
        ValueError: If a constraint refers to a variable not in variables
    """
    index: Dict[Variable, int] = {v: i for i, v in enumerate(variables)}
    graph = nx.MultiDiGraph()

    for i, v in enumerate(variables):
        graph.add_node(
            i,
            desired_position=v.desired_position,
            weight=v.weight,
            scale=v.scale,
            offset=v.offset,
            position=v.position() if v.block is not None else None,
            block=v.block.block_ind if v.block is not None else None,
        )

    for k, c in enumerate(constraints):
        if c.left not in index or c.right not in index:
            raise ValueError(f"Constraint {k} refers to a variable outside the problem")
        assigned = c.left.block is not None and c.right.block is not None
        graph.add_edge(
            index[c.left],
            index[c.right],
            key=k,
            gap=c.gap,
            equality=c.equality,
            active=c.active,
            unsatisfiable=c.unsatisfiable,
            lm=c.lm,
            slack=c.slack() if assigned else None,
        )

    return graph


def solve_graph(graph: nx.DiGraph) -> float:
    """Solve a constraint graph in place.

    Writes each node's solved position to its 'position' attribute.

    Returns:
        Final solver cost
    """
    variables, constraints = graph_to_problem(graph)
    cost = Solver(list(variables.values()), constraints).solve()
    for node, v in variables.items():
        graph.nodes[node]["position"] = v.position()
    return cost


def active_edges(graph: nx.MultiDiGraph) -> List[Tuple[Any, Any, Any]]:
    """Edges of a problem snapshot whose constraints are active."""
    return [
        (u, v, k) for u, v, k, active in graph.edges(keys=True, data="active") if active
    ]
