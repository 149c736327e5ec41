from typing import Any, Dict

from ..core.evaluator import Evaluator
from ..core.graph import FromDict, Graph


def feed_keys(graph: Graph) -> Dict[str, int]:
    """
    Returns every TensorDict key the graph reads, with the number of operands reading it.

    Useful to check a TensorDict against a graph before evaluating it.
    """
    counts: Dict[str, int] = {}
    for op in graph:
        for input in op.inputs:
            if isinstance(input, FromDict):
                counts[input.key] = counts.get(input.key, 0) + 1
    return counts


def describe(graph: Graph, target: Any = None) -> str:
    """
    Renders the graph one Op per line.

    Args:
        graph: Graph to render
        target: Optional output; when given only its ancestors are listed, in
            the order the evaluator would run them
    """
    if target is None:
        ops = list(graph)
    else:
        ops = [graph[node] for node in Evaluator.execution_plan(graph, [target])]
    return "\n".join(repr(op) for op in ops)
