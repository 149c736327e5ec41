from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence, Tuple, Type, TypeVar, Union

import numpy as np
from numpy.typing import NDArray

from .errors import ArityMismatch, InternalInvariantError, ShapeMismatch, UnknownOpKind
from .tensor import Tensor

Shape = Tuple[int, ...]

_REGISTRY: Dict[str, Type["OpKind"]] = {}

K = TypeVar("K", bound=Type["OpKind"])


class OpKind(ABC):
    """
    Base class for all graph operations.

    An op kind is a pure computation: it declares how many operands it takes,
    how many outputs it produces, which operand shapes it accepts and how the
    outputs are computed from the operand arrays. Non-tensor parameters (an
    axis, a target shape, a fill value) are passed as keyword attributes which
    the Graph stores on the Op.

    Kinds are never instantiated; like autograd functions they are used through
    their static methods and the ``apply`` classmethod.
    """

    name: str = ""
    arity: Optional[int] = None

    @classmethod
    def num_outputs(cls, **attrs: Any) -> int:
        """Number of tensors ``forward`` produces. Single output unless overridden."""
        return 1

    @classmethod
    def validate_shapes(cls, *shapes: Shape, **attrs: Any) -> None:
        """
        Checks that the operand shapes are acceptable.

        Args:
            *shapes: Shapes of the operands, in order
            **attrs: The Op's attributes

        Raises:
            ShapeMismatch: If the shapes violate the kind's constraints
        """

    @staticmethod
    @abstractmethod
    def forward(*arrays: NDArray[Any], **attrs: Any) -> Union[NDArray[Any], Sequence[NDArray[Any]]]:
        """
        Performs the computation on plain numpy arrays.

        Returns:
            A single array for single-output kinds, otherwise a sequence of arrays
        """
        raise NotImplementedError

    @classmethod
    def check_arity(cls, count: int) -> None:
        if cls.arity is not None and count != cls.arity:
            raise ArityMismatch(cls.name, cls.arity, count)

    @classmethod
    def mismatch(cls, shapes: Sequence[Shape], reason: str) -> ShapeMismatch:
        return ShapeMismatch(cls.name, shapes, reason)

    @classmethod
    def apply(cls, *operands: Tensor, **attrs: Any) -> Tuple[Tensor, ...]:
        """
        Applies the kind to concrete tensors.

        This method:
        1. Checks the operand count
        2. Validates the operand shapes
        3. Runs the forward computation
        4. Wraps every output in an immutable Tensor
        """
        cls.check_arity(len(operands))
        cls.validate_shapes(*(operand.shape for operand in operands), **attrs)

        result = cls.forward(*(operand.data for operand in operands), **attrs)
        expected = cls.num_outputs(**attrs)
        # Multi-output kinds return a list or tuple, even when it holds a single array
        if isinstance(result, (list, tuple)):
            outputs = tuple(result)
        else:
            outputs = (result,)
        if len(outputs) != expected:
            raise InternalInvariantError(
                f"{cls.name} declared {expected} output(s) but produced {len(outputs)}"
            )
        return tuple(Tensor(np.asarray(output)) for output in outputs)


def register_op(kind: K) -> K:
    """
    Class decorator registering an op kind under its ``name``.

    Raises:
        ValueError: If the kind has no name or the name is already taken by another kind
    """
    if not kind.name:
        raise ValueError(f"{kind.__name__} must define a non-empty name")
    existing = _REGISTRY.get(kind.name)
    if existing is not None and existing is not kind:
        raise ValueError(f"Op kind {kind.name!r} is already registered by {existing.__name__}")
    _REGISTRY[kind.name] = kind
    return kind


def unregister_op(name: str) -> None:
    _REGISTRY.pop(name, None)


def get_op_kind(kind: Union[str, Type[OpKind]]) -> Type[OpKind]:
    """
    Resolves an op kind from its registered name or returns the class unchanged.

    Raises:
        UnknownOpKind: If no kind is registered under the name
        TypeError: If ``kind`` is neither a name nor an OpKind subclass
    """
    if isinstance(kind, str):
        try:
            return _REGISTRY[kind]
        except KeyError:
            raise UnknownOpKind(kind) from None
    if isinstance(kind, type) and issubclass(kind, OpKind):
        return kind
    raise TypeError(f"Expected an op kind name or OpKind subclass, got {kind!r}")


def registered_op_kinds() -> Tuple[str, ...]:
    return tuple(sorted(_REGISTRY))
