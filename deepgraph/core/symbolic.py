from typing import Any, Mapping, Optional, Sequence, Tuple, Type, Union

import numpy as np
from numpy.typing import DTypeLike

from .evaluator import Evaluator, get_default_evaluator
from .function import OpKind
from .graph import FromDict, FromOp, Graph, Input, as_input
from .tensor import Tensor


class LazyTensor:
    """
    A not yet computed tensor: a Graph plus the Input it denotes.

    Arithmetic on lazy tensors records Ops instead of computing anything. A
    binary operation copies the left operand's graph, merges the right
    operand's graph into it (shifting its node indices) and appends the new Op,
    so the graphs of existing lazy tensors are never modified.

    Example:
        >>> x = LazyTensor.feed("x")
        >>> y = (x * x + x).eval({"x": [1.0, 2.0]})
        >>> y.tolist()
        [2.0, 6.0]
    """

    __slots__ = ("graph", "input")

    def __init__(self, graph: Graph, input: Input):
        self.graph = graph
        self.input = as_input(input)

    @classmethod
    def feed(cls, key: str) -> "LazyTensor":
        """Creates a lazy tensor whose value is fetched from the TensorDict under ``key``."""
        return cls(Graph(), FromDict(key))

    @classmethod
    def constant(cls, shape: Sequence[int], value: float, dtype: DTypeLike = np.float64) -> "LazyTensor":
        graph = Graph()
        node = graph.add_op("constant", [], shape=tuple(shape), value=value, dtype=np.dtype(dtype).name)
        return cls(graph, FromOp(node))

    def _unary(self, kind: Union[str, Type[OpKind]], **attrs: Any) -> "LazyTensor":
        graph = self.graph.copy()
        node = graph.add_op(kind, [self.input], **attrs)
        return LazyTensor(graph, FromOp(node))

    def _binary(self, other: "LazyTensor", kind: Union[str, Type[OpKind]]) -> "LazyTensor":
        if not isinstance(other, LazyTensor):
            return NotImplemented
        graph = self.graph.copy()
        if other.graph is self.graph:
            other_input = other.input
        else:
            other_input = graph.merge_input(other.graph, other.input)
        node = graph.add_op(kind, [self.input, other_input])
        return LazyTensor(graph, FromOp(node))

    def __add__(self, other: "LazyTensor") -> "LazyTensor":
        return self._binary(other, "add")

    def __sub__(self, other: "LazyTensor") -> "LazyTensor":
        return self._binary(other, "sub")

    def __mul__(self, other: "LazyTensor") -> "LazyTensor":
        return self._binary(other, "multiply")

    def __matmul__(self, other: "LazyTensor") -> "LazyTensor":
        return self._binary(other, "matmul")

    def squared(self) -> "LazyTensor":
        return self._unary("square")

    def identity(self) -> "LazyTensor":
        return self._unary("identity")

    def reshape(self, *shape: int) -> "LazyTensor":
        # Unwrap nested tuples if passed as single argument
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        return self._unary("reshape", shape=tuple(shape))

    def transpose(self, *axes: int) -> "LazyTensor":
        return self._unary("transpose", axes=tuple(axes) if axes else None)

    def slice(
        self,
        begin: Sequence[int],
        end: Optional[Sequence[int]] = None,
        step: Optional[Sequence[int]] = None,
    ) -> "LazyTensor":
        return self._unary(
            "slice",
            begin=tuple(begin),
            end=tuple(end) if end is not None else None,
            step=tuple(step) if step is not None else None,
        )

    def split(self, sections: int, axis: int = 0) -> Tuple["LazyTensor", ...]:
        """Splits into ``sections`` lazy tensors which share a single split Op."""
        graph = self.graph.copy()
        node = graph.add_op("split", [self.input], sections=sections, axis=axis)
        return tuple(LazyTensor(graph, FromOp(node, output)) for output in range(sections))

    def eval(self, tensor_dict: Mapping[str, Any], evaluator: Optional[Evaluator] = None) -> Tensor:
        """Evaluates the tensor against ``tensor_dict``."""
        evaluator = evaluator or get_default_evaluator()
        return evaluator.evaluate(self.graph, tensor_dict, self.input)

    def __repr__(self) -> str:
        return f"LazyTensor({self.input!r}, ops={len(self.graph)})"
