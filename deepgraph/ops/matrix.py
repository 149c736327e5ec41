from typing import Any, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.function import OpKind, Shape, register_op


@register_op
class Transpose(OpKind):
    """Permutes the axes of the operand; reverses them when ``axes`` is None."""

    name = "transpose"
    arity = 1

    @classmethod
    def validate_shapes(cls, shape_x: Shape, axes: Optional[Sequence[int]] = None, **attrs: Any) -> None:
        if axes is None:
            return
        if sorted(axes) != list(range(len(shape_x))):
            raise cls.mismatch(
                (shape_x,), f"axes {tuple(axes)} are not a permutation of {len(shape_x)} axes"
            )

    @staticmethod
    def forward(x: NDArray[Any], axes: Optional[Sequence[int]] = None, **attrs: Any) -> NDArray[Any]:
        if axes is None:
            return np.transpose(x)
        return np.transpose(x, tuple(axes))
