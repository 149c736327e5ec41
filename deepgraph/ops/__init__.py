"""
Operations module for deepgraph.

Importing this module registers the built-in op kinds by name, so graphs can
refer to them as ``"add"``, ``"matmul"`` and so on.
"""

from .basic import Add, Broadcast, MatMul, Multiply, Sub
from .elementwise import Constant, Identity, Square
from .matrix import Transpose
from .reshape import Reshape, Slice, Split

__all__ = [
    # Basic operations
    "Add",
    "Sub",
    "Multiply",
    "MatMul",
    "Broadcast",
    # Element-wise operations
    "Identity",
    "Square",
    "Constant",
    # Shape operations
    "Reshape",
    "Slice",
    "Split",
    # Matrix operations
    "Transpose",
]
