"""
Core functionality for deepgraph.

This module contains the graph data model, the tensor containers and the evaluator.
"""

from .cache import EvaluationCache
from .config import EvaluatorConfig
from .errors import (
    ArityMismatch,
    GraphError,
    InternalInvariantError,
    InvalidReference,
    MissingKey,
    ShapeMismatch,
    UnknownOpKind,
)
from .evaluator import Evaluator, evaluate, get_default_evaluator, set_default_evaluator
from .function import OpKind, get_op_kind, register_op, registered_op_kinds, unregister_op
from .graph import FromDict, FromOp, Graph, Input, Op, as_input
from .symbolic import LazyTensor
from .tensor import Tensor
from .tensor_dict import TensorDict

__all__ = [
    "Tensor",
    "TensorDict",
    "Graph",
    "Op",
    "Input",
    "FromDict",
    "FromOp",
    "as_input",
    "OpKind",
    "register_op",
    "unregister_op",
    "get_op_kind",
    "registered_op_kinds",
    "Evaluator",
    "EvaluatorConfig",
    "EvaluationCache",
    "evaluate",
    "get_default_evaluator",
    "set_default_evaluator",
    "LazyTensor",
    "GraphError",
    "InvalidReference",
    "ArityMismatch",
    "UnknownOpKind",
    "MissingKey",
    "ShapeMismatch",
    "InternalInvariantError",
]
