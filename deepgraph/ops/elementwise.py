from typing import Any, Sequence

import numpy as np
from numpy.typing import DTypeLike, NDArray

from ..core.function import OpKind, register_op


@register_op
class Identity(OpKind):
    """Passes its operand through unchanged."""

    name = "identity"
    arity = 1

    @staticmethod
    def forward(x: NDArray[Any], **attrs: Any) -> NDArray[Any]:
        return x


@register_op
class Square(OpKind):
    """
    Elementwise square.

    Forward: f(x) = x * x
    """

    name = "square"
    arity = 1

    @staticmethod
    def forward(x: NDArray[Any], **attrs: Any) -> NDArray[Any]:
        return np.square(x)


@register_op
class Constant(OpKind):
    """
    Tensor of a given shape filled with a single value.

    Takes no operands. Attributes:
        shape: Shape of the produced tensor
        value: Fill value
        dtype: Element type, float64 by default
    """

    name = "constant"
    arity = 0

    @classmethod
    def validate_shapes(cls, *shapes: Any, shape: Sequence[int] = (), **attrs: Any) -> None:
        if any(int(dim) < 0 for dim in shape):
            raise cls.mismatch((tuple(shape),), "dimensions must be non-negative")

    @staticmethod
    def forward(
        shape: Sequence[int] = (), value: float = 0.0, dtype: DTypeLike = np.float64, **attrs: Any
    ) -> NDArray[Any]:
        return np.full(tuple(shape), value, dtype=dtype)
