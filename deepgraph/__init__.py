"""
deepgraph: lazy evaluation of tensor computation graphs

Graphs are built append-only out of Ops reading either named inputs from a
TensorDict or the outputs of earlier Ops. An Evaluator computes any requested
output on demand, running only the Ops it depends on, each at most once.
"""

import logging

from . import ops  # noqa: F401  (registers the built-in op kinds)
from .core import (
    ArityMismatch,
    EvaluationCache,
    Evaluator,
    EvaluatorConfig,
    FromDict,
    FromOp,
    Graph,
    GraphError,
    InternalInvariantError,
    InvalidReference,
    LazyTensor,
    MissingKey,
    Op,
    OpKind,
    ShapeMismatch,
    Tensor,
    TensorDict,
    UnknownOpKind,
    evaluate,
    get_default_evaluator,
    register_op,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "Tensor",
    "TensorDict",
    "Graph",
    "Op",
    "FromDict",
    "FromOp",
    "OpKind",
    "register_op",
    "Evaluator",
    "EvaluatorConfig",
    "EvaluationCache",
    "evaluate",
    "get_default_evaluator",
    "LazyTensor",
    "GraphError",
    "InvalidReference",
    "ArityMismatch",
    "UnknownOpKind",
    "MissingKey",
    "ShapeMismatch",
    "InternalInvariantError",
]
