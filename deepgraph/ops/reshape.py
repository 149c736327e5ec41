from typing import Any, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.function import OpKind, Shape, register_op


@register_op
class Reshape(OpKind):
    name = "reshape"
    arity = 1

    @classmethod
    def validate_shapes(cls, shape_x: Shape, shape: Sequence[int] = (), **attrs: Any) -> None:
        target = tuple(int(d) for d in shape)
        shapes = (shape_x, target)
        if target.count(-1) > 1:
            raise cls.mismatch(shapes, "only one dimension can be inferred")
        if any(d < -1 for d in target):
            raise cls.mismatch(shapes, "dimensions must be non-negative or -1")

        size = int(np.prod(shape_x, dtype=np.int64))
        known = int(np.prod([d for d in target if d != -1], dtype=np.int64))
        if -1 in target:
            if known == 0 or size % known != 0:
                raise cls.mismatch(shapes, f"cannot infer a dimension for {size} elements")
        elif known != size:
            raise cls.mismatch(shapes, f"cannot reshape {size} elements into {target}")

    @staticmethod
    def forward(x: NDArray[Any], shape: Sequence[int] = (), **attrs: Any) -> NDArray[Any]:
        # Ensure all dimensions are integers
        return x.reshape(tuple(int(d) for d in shape))


@register_op
class Slice(OpKind):
    """
    Contiguous (optionally strided) window of the operand.

    Attributes:
        begin: Start index for each leading axis
        end: Stop index for each leading axis; defaults to the axis length
        step: Stride for each leading axis; defaults to 1

    Axes not covered by ``begin`` are kept whole. Bounds are not clipped the
    way Python slicing clips them: an out of range window is an error.
    """

    name = "slice"
    arity = 1

    @staticmethod
    def _bounds(
        shape_x: Shape,
        begin: Sequence[int],
        end: Optional[Sequence[int]],
        step: Optional[Sequence[int]],
    ) -> List[slice]:
        end = list(end) if end is not None else [shape_x[axis] for axis in range(len(begin))]
        step = list(step) if step is not None else [1] * len(begin)
        return [slice(int(b), int(e), int(s)) for b, e, s in zip(begin, end, step)]

    @classmethod
    def validate_shapes(
        cls,
        shape_x: Shape,
        begin: Sequence[int] = (),
        end: Optional[Sequence[int]] = None,
        step: Optional[Sequence[int]] = None,
        **attrs: Any,
    ) -> None:
        shapes = (shape_x,)
        if len(begin) > len(shape_x):
            raise cls.mismatch(shapes, f"{len(begin)} axes sliced on a rank {len(shape_x)} operand")
        for name, values in (("end", end), ("step", step)):
            if values is not None and len(values) != len(begin):
                raise cls.mismatch(shapes, f"{name} has {len(values)} entries, begin has {len(begin)}")

        for axis, window in enumerate(cls._bounds(shape_x, begin, end, step)):
            if window.step < 1:
                raise cls.mismatch(shapes, f"step on axis {axis} must be positive")
            if not 0 <= window.start <= window.stop <= shape_x[axis]:
                raise cls.mismatch(
                    shapes,
                    f"window [{window.start}, {window.stop}) out of range for axis {axis} "
                    f"of length {shape_x[axis]}",
                )

    @staticmethod
    def forward(
        x: NDArray[Any],
        begin: Sequence[int] = (),
        end: Optional[Sequence[int]] = None,
        step: Optional[Sequence[int]] = None,
        **attrs: Any,
    ) -> NDArray[Any]:
        return x[tuple(Slice._bounds(x.shape, begin, end, step))]


@register_op
class Split(OpKind):
    """Splits the operand into ``sections`` equal parts along ``axis``; one output per part."""

    name = "split"
    arity = 1

    @classmethod
    def num_outputs(cls, sections: int = 1, **attrs: Any) -> int:
        if isinstance(sections, bool) or not isinstance(sections, int) or sections < 1:
            raise ValueError(f"split sections must be a positive integer, got {sections!r}")
        return sections

    @classmethod
    def validate_shapes(cls, shape_x: Shape, sections: int = 1, axis: int = 0, **attrs: Any) -> None:
        shapes = (shape_x,)
        if not -len(shape_x) <= axis < len(shape_x):
            raise cls.mismatch(shapes, f"axis {axis} out of range")
        length = shape_x[axis]
        if length % sections != 0:
            raise cls.mismatch(shapes, f"axis of length {length} does not split into {sections}")

    @staticmethod
    def forward(x: NDArray[Any], sections: int = 1, axis: int = 0, **attrs: Any) -> List[NDArray[Any]]:
        return np.split(x, sections, axis=axis)
