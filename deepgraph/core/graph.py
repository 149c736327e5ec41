"""
Graph representation.

A Graph is a flat, append-only list of Ops addressed by integer index. Each Op
reads its operands through Inputs, which either name a key of the TensorDict
(``FromDict``) or an output of an earlier Op (``FromOp``). Because an Op may
only refer to Ops that were added before it, every graph is acyclic by
construction and no cycle detection is ever needed.
"""

import logging
import numbers
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Mapping, Sequence, Tuple, Type, Union

import numpy as np

from .errors import InvalidReference
from .function import OpKind, get_op_kind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FromDict:
    """Input read from the TensorDict under ``key``."""

    key: str

    def __post_init__(self) -> None:
        if not isinstance(self.key, str):
            raise TypeError(f"FromDict key must be str, got {type(self.key).__name__}")


@dataclass(frozen=True)
class FromOp:
    """Input read from output ``output`` of the Op at index ``node``."""

    node: int
    output: int = 0

    def __post_init__(self) -> None:
        for name in ("node", "output"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise TypeError(f"FromOp.{name} must be int, got {type(value).__name__}")
            # numpy integers are stored as plain ints
            value = int(value)
            object.__setattr__(self, name, value)
            if value < 0:
                raise InvalidReference(self.node, self.output, -1, f"{name} must be non-negative")


Input = Union[FromDict, FromOp]


def as_input(value: Any) -> Input:
    """
    Converts a loose value into an Input.

    Args:
        value: An Input, a dictionary key (``str``), a node index (``int``) or a
            ``(node, output)`` pair

    Returns:
        The corresponding ``FromDict`` or ``FromOp``
    """
    if isinstance(value, (FromDict, FromOp)):
        return value
    if isinstance(value, str):
        return FromDict(value)
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return FromOp(int(value))
    if isinstance(value, tuple) and len(value) == 2:
        return FromOp(*value)
    raise TypeError(f"Cannot use {value!r} as a graph input")


def shift_input(input: Input, shift: int) -> Input:
    """Moves a ``FromOp`` reference ``shift`` nodes further; ``FromDict`` is unchanged."""
    if isinstance(input, FromOp):
        return FromOp(input.node + shift, input.output)
    if isinstance(input, FromDict):
        return input
    raise TypeError(f"Unknown input variant: {input!r}")


def freeze_attr(value: Any) -> Any:
    """Returns an immutable equivalent of an attribute value (lists become tuples)."""
    if isinstance(value, (list, tuple)):
        return tuple(freeze_attr(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze_attr(item) for item in value)
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_attr(item) for key, item in value.items()})
    if isinstance(value, np.ndarray):
        array = value.copy()
        array.setflags(write=False)
        return array
    return value


@dataclass(frozen=True)
class Op:
    """
    A single computation node.

    Attributes:
        index: Position of the Op in its Graph
        kind: The op kind computing the outputs
        inputs: Operands, in the order the kind expects them
        attrs: Non-tensor parameters forwarded to the kind
        num_outputs: Number of tensors the Op produces
    """

    index: int
    kind: Type[OpKind]
    inputs: Tuple[Input, ...]
    attrs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    num_outputs: int = 1

    def dependencies(self) -> Tuple[int, ...]:
        """Indices of the Ops this Op reads from, without duplicates, in operand order."""
        seen: List[int] = []
        for input in self.inputs:
            if isinstance(input, FromOp) and input.node not in seen:
                seen.append(input.node)
        return tuple(seen)

    def __hash__(self) -> int:
        # Raises TypeError for attribute values that stay unhashable once frozen (arrays)
        attrs = tuple(sorted(self.attrs.items()))
        return hash((self.index, self.kind, self.inputs, attrs, self.num_outputs))

    def shifted(self, shift: int) -> "Op":
        return replace(
            self,
            index=self.index + shift,
            inputs=tuple(shift_input(input, shift) for input in self.inputs),
        )

    def __repr__(self) -> str:
        operands = ", ".join(_format_input(input) for input in self.inputs)
        attrs = "".join(f", {key}={value!r}" for key, value in self.attrs.items())
        return f"Op#{self.index}({self.kind.name}: {operands}{attrs})"


def _format_input(input: Input) -> str:
    if isinstance(input, FromDict):
        return repr(input.key)
    return f"%{input.node}.{input.output}"


class Graph:
    """
    Append-only collection of Ops forming a computation DAG.

    Ops are added with ``add_op`` and never removed. Every ``FromOp`` input must
    refer to an Op that is already in the graph, which keeps the graph acyclic.
    A graph may be shared by any number of concurrent evaluations as long as no
    Op is appended meanwhile.

    Example:
        >>> graph = Graph()
        >>> x = graph.add_op("identity", ["x"])
        >>> y = graph.add_op("multiply", [FromOp(x), FromOp(x)])
    """

    def __init__(self, ops: Iterable[Op] = ()):
        self._ops: List[Op] = []
        for op in ops:
            self.add_op(op.kind, op.inputs, **op.attrs)

    def add_op(self, kind: Union[str, Type[OpKind]], inputs: Sequence[Any] = (), **attrs: Any) -> int:
        """
        Appends an Op and returns its index.

        Args:
            kind: Op kind class or registered kind name
            inputs: Operands; anything ``as_input`` accepts
            **attrs: Attributes forwarded to the kind

        Returns:
            Index of the new Op, usable as ``FromOp(index)`` by later Ops

        Raises:
            InvalidReference: If an input refers to an Op not yet in the graph,
                or to an output that Op does not have
            ArityMismatch: If the number of inputs does not match the kind
            UnknownOpKind: If ``kind`` is an unregistered name

        A rejected call leaves the graph unchanged.
        """
        op_kind = get_op_kind(kind)
        resolved = tuple(as_input(input) for input in inputs)
        op_kind.check_arity(len(resolved))
        for input in resolved:
            if isinstance(input, FromOp):
                self._check_reference(input)

        frozen = {key: freeze_attr(value) for key, value in attrs.items()}
        index = len(self._ops)
        op = Op(
            index=index,
            kind=op_kind,
            inputs=resolved,
            attrs=MappingProxyType(frozen),
            num_outputs=op_kind.num_outputs(**frozen),
        )
        self._ops.append(op)
        logger.debug("Added %r", op)
        return index

    def _check_reference(self, input: FromOp) -> None:
        size = len(self._ops)
        if input.node >= size:
            raise InvalidReference(input.node, input.output, size)
        available = self._ops[input.node].num_outputs
        if input.output >= available:
            raise InvalidReference(
                input.node,
                input.output,
                size,
                f"node {input.node} has only {available} output(s)",
            )

    def output(self, node: int, output: int = 0) -> FromOp:
        """
        Returns a validated reference to an output of an existing Op.

        Raises:
            InvalidReference: If the Op or output does not exist
        """
        reference = FromOp(node, output)
        self._check_reference(reference)
        return reference

    def merge(self, other: "Graph") -> int:
        """
        Appends all Ops of ``other`` to this graph.

        The ``FromOp`` references of the appended Ops are shifted by the current
        length so they still point at the same Ops.

        Returns:
            The shift applied, i.e. the index the first Op of ``other`` now has
        """
        shift = len(self._ops)
        # Snapshot first so merging a graph into itself terminates
        for op in list(other._ops):
            self._ops.append(op.shifted(shift))
        logger.debug("Merged %d op(s) at offset %d", len(other._ops), shift)
        return shift

    def merge_input(self, other: "Graph", input: Any) -> Input:
        """Merges ``other`` and returns ``input`` re-targeted into this graph's indices."""
        shift = self.merge(other)
        return shift_input(as_input(input), shift)

    def copy(self) -> "Graph":
        copy = Graph()
        copy._ops = list(self._ops)
        return copy

    @property
    def ops(self) -> Tuple[Op, ...]:
        return tuple(self._ops)

    def __len__(self) -> int:
        return len(self._ops)

    def __getitem__(self, index: int) -> Op:
        return self._ops[index]

    def __iter__(self) -> Iterator[Op]:
        return iter(self._ops)

    def __repr__(self) -> str:
        lines = "\n".join(f"  {op!r}" for op in self._ops)
        return f"Graph(\n{lines}\n)" if lines else "Graph()"
