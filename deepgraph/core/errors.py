from typing import Any, Optional, Sequence, Tuple


class GraphError(Exception):
    """Base class for every error raised by deepgraph."""


class InvalidReference(GraphError, IndexError):
    """
    Raised when an Input points at an Op (or Op output) that does not exist yet.

    Attributes:
        node: The referenced node index
        output: The referenced output index
        graph_size: Number of Ops in the graph when the reference was checked
    """

    def __init__(self, node: int, output: int, graph_size: int, reason: Optional[str] = None):
        self.node = node
        self.output = output
        self.graph_size = graph_size
        message = reason or f"node {node} does not exist in a graph of {graph_size} ops"
        super().__init__(f"Invalid reference to ({node}, {output}): {message}")


class ArityMismatch(GraphError, TypeError):
    """Raised when an Op receives a different number of operands than its kind accepts."""

    def __init__(self, kind: str, expected: int, received: int):
        self.kind = kind
        self.expected = expected
        self.received = received
        super().__init__(f"{kind} expects {expected} operand(s), got {received}")


class UnknownOpKind(GraphError, KeyError):
    """Raised when an op kind name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown op kind: {self.name!r}"


class MissingKey(GraphError, KeyError):
    """Raised when a TensorDict lookup fails."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"No tensor stored under key {self.key!r}"


class ShapeMismatch(GraphError, ValueError):
    """
    Raised when an op kind rejects the shapes of its operands.

    Attributes:
        kind: Name of the op kind that rejected the operands
        shapes: Shapes of the operands, in operand order
        reason: Human readable description of the violated constraint
        node: Index of the failing Op, filled in by the evaluator
    """

    def __init__(self, kind: str, shapes: Sequence[Tuple[int, ...]], reason: str):
        self.kind = kind
        self.shapes = tuple(tuple(shape) for shape in shapes)
        self.reason = reason
        self.node: Optional[int] = None
        super().__init__(kind, self.shapes, reason)

    def __str__(self) -> str:
        shapes = ", ".join(str(shape) for shape in self.shapes)
        location = f" at node {self.node}" if self.node is not None else ""
        return f"{self.kind}{location}: {self.reason} (operand shapes: {shapes})"


class InternalInvariantError(GraphError, RuntimeError):
    """Raised when evaluation finds a state that graph construction should have ruled out."""
