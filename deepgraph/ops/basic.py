from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..core.function import OpKind, Shape, register_op


class Broadcast(OpKind):
    """Base class for binary elementwise operations following numpy broadcasting."""

    arity = 2

    @classmethod
    def validate_shapes(cls, shape_a: Shape, shape_b: Shape, **attrs: Any) -> None:
        try:
            np.broadcast_shapes(shape_a, shape_b)
        except ValueError:
            raise cls.mismatch(
                (shape_a, shape_b), f"cannot broadcast shape {shape_a} with {shape_b}"
            ) from None


@register_op
class Add(Broadcast):
    name = "add"

    @staticmethod
    def forward(a: NDArray[Any], b: NDArray[Any], **attrs: Any) -> NDArray[Any]:
        return a + b


@register_op
class Sub(Broadcast):
    name = "sub"

    @staticmethod
    def forward(a: NDArray[Any], b: NDArray[Any], **attrs: Any) -> NDArray[Any]:
        return a - b


@register_op
class Multiply(Broadcast):
    name = "multiply"

    @staticmethod
    def forward(a: NDArray[Any], b: NDArray[Any], **attrs: Any) -> NDArray[Any]:
        return a * b


@register_op
class MatMul(OpKind):
    """
    Matrix multiplication with support for batched operations.

    Follows ``np.matmul``: the last axis of ``a`` contracts with the second to
    last axis of ``b`` (its only axis when ``b`` is a vector), and leading batch
    axes broadcast against each other.
    """

    name = "matmul"
    arity = 2

    @classmethod
    def validate_shapes(cls, shape_a: Shape, shape_b: Shape, **attrs: Any) -> None:
        shapes = (shape_a, shape_b)
        if len(shape_a) == 0 or len(shape_b) == 0:
            raise cls.mismatch(shapes, "operands must have at least one dimension")

        inner_a = shape_a[-1]
        inner_b = shape_b[-2] if len(shape_b) >= 2 else shape_b[0]
        if inner_a != inner_b:
            raise cls.mismatch(shapes, f"inner dimensions differ ({inner_a} vs {inner_b})")

        try:
            np.broadcast_shapes(shape_a[:-2], shape_b[:-2])
        except ValueError:
            raise cls.mismatch(
                shapes, f"batch dimensions {shape_a[:-2]} and {shape_b[:-2]} do not broadcast"
            ) from None

    @staticmethod
    def forward(a: NDArray[Any], b: NDArray[Any], **attrs: Any) -> NDArray[Any]:
        return np.matmul(a, b)
