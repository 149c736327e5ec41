import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .cache import EvaluationCache
from .config import EvaluatorConfig
from .errors import GraphError, InternalInvariantError, ShapeMismatch
from .graph import FromDict, FromOp, Graph, Input, Op, as_input
from .tensor import Tensor
from .tensor_dict import TensorDict

logger = logging.getLogger(__name__)

Target = Union[Input, Tuple[int, int], int, str]


class Evaluator:
    """
    Demand-driven executor for graphs.

    Given a graph, a TensorDict and a target output, the evaluator:
    1. Walks backwards from the target through its inputs to find the Ops it
       depends on (and nothing else)
    2. Orders those Ops so every Op comes after the Ops it reads from
    3. Runs each of them exactly once, memoizing outputs in an EvaluationCache
    4. Returns the target's Tensor

    Each run owns its cache, so one evaluator (and one graph) can serve several
    runs at once from different threads.
    """

    def __init__(self, config: Optional[EvaluatorConfig] = None) -> None:
        self.config = config or EvaluatorConfig()

    def evaluate(self, graph: Graph, tensor_dict: Mapping[str, Any], target: Target) -> Tensor:
        """
        Computes a single output of the graph.

        Args:
            graph: Graph holding the Ops
            tensor_dict: Values for the graph's ``FromDict`` inputs
            target: ``FromOp``/``(node, output)``/node index of the output to
                compute, or a ``FromDict``/key which is looked up directly

        Returns:
            The computed tensor

        Raises:
            MissingKey: If a required dictionary key is absent
            ShapeMismatch: If an Op rejects its operand shapes
            InvalidReference: If ``target`` names an output that does not exist
            InternalInvariantError: If the graph turned out to be malformed
        """
        return self.evaluate_many(graph, tensor_dict, [target])[0]

    def evaluate_many(
        self, graph: Graph, tensor_dict: Mapping[str, Any], targets: Sequence[Target]
    ) -> List[Tensor]:
        """Computes several outputs in one run; shared ancestors are computed once."""
        resolved = [as_input(target) for target in targets]
        for target in resolved:
            if isinstance(target, FromOp):
                graph.output(target.node, target.output)

        if isinstance(tensor_dict, TensorDict):
            feeds = tensor_dict.snapshot()
        else:
            feeds = TensorDict(tensor_dict)

        plan = self.execution_plan(graph, resolved)
        if self.config.log_plan:
            logger.debug("Execution plan: %s", " -> ".join(repr(graph[node]) for node in plan))

        cache = EvaluationCache(plan)
        start = time.perf_counter()
        try:
            if self.config.parallel and len(plan) > 1:
                self._run_parallel(graph, feeds, plan, cache)
            else:
                self._run_sequential(graph, feeds, plan, cache)
            results = [self._resolve(target, feeds, cache) for target in resolved]
        except GraphError as exc:
            logger.warning("Evaluation of %s failed: %s", _format_targets(resolved), exc)
            raise
        finally:
            cache.clear()

        logger.debug(
            "Evaluated %s: %d op(s) in %.3f ms",
            _format_targets(resolved),
            len(plan),
            (time.perf_counter() - start) * 1000,
        )
        return results

    @staticmethod
    def execution_plan(graph: Graph, targets: Iterable[Target]) -> List[int]:
        """
        Returns the indices of the Ops the targets depend on, in execution order.

        The order is the post-order of an iterative depth-first traversal that
        starts at each target and follows ``FromOp`` inputs backwards, so every
        Op is listed after all Ops it reads from. Ops that no target depends on
        are not listed.
        """
        order: List[int] = []
        visited: Set[int] = set()

        for target in targets:
            target = as_input(target)
            if not isinstance(target, FromOp) or target.node in visited:
                continue

            stack: List[Tuple[int, bool]] = [(target.node, False)]
            while stack:
                node, expanded = stack.pop()
                if expanded:
                    order.append(node)
                    continue
                if node in visited:
                    continue
                visited.add(node)
                stack.append((node, True))
                # Reversed so the first operand is visited first
                for dependency in reversed(graph[node].dependencies()):
                    if dependency >= node:
                        raise InternalInvariantError(
                            f"Node {node} reads from node {dependency}, which is not an earlier op"
                        )
                    if dependency not in visited:
                        stack.append((dependency, False))

        return order

    def _run_sequential(
        self, graph: Graph, feeds: TensorDict, plan: Sequence[int], cache: EvaluationCache
    ) -> None:
        for node in plan:
            self._execute(graph[node], feeds, cache)

    def _run_parallel(
        self, graph: Graph, feeds: TensorDict, plan: Sequence[int], cache: EvaluationCache
    ) -> None:
        # Tasks are queued in topological order and the pool starts them first in,
        # first out, so the oldest running task never waits on a task that has not started.
        aborted = threading.Event()

        def task(node: int) -> None:
            op = graph[node]
            for dependency in op.dependencies():
                if not cache.wait(dependency):
                    cache.mark_failed(node)
                    return
            if aborted.is_set():
                cache.mark_failed(node)
                return
            try:
                self._execute(op, feeds, cache)
            except BaseException:
                aborted.set()
                cache.mark_failed(node)
                raise

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="deepgraph"
        ) as pool:
            futures = [pool.submit(task, node) for node in plan]

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

    def _execute(self, op: Op, feeds: TensorDict, cache: EvaluationCache) -> None:
        operands = [self._resolve(input, feeds, cache) for input in op.inputs]
        try:
            outputs = op.kind.apply(*operands, **op.attrs)
        except ShapeMismatch as exc:
            exc.node = op.index
            raise
        cache.put(op.index, outputs)
        logger.debug(
            "Computed %r -> %s", op, ", ".join(str(output.shape) for output in outputs)
        )

    @staticmethod
    def _resolve(input: Input, feeds: TensorDict, cache: EvaluationCache) -> Tensor:
        if isinstance(input, FromDict):
            return feeds.get(input.key)
        if isinstance(input, FromOp):
            return cache.get(input.node, input.output)
        raise InternalInvariantError(f"Unknown input variant: {input!r}")


def _format_targets(targets: Sequence[Input]) -> str:
    return ", ".join(
        repr(target.key) if isinstance(target, FromDict) else f"({target.node}, {target.output})"
        for target in targets
    )


# Process-wide evaluator used by the module level ``evaluate``
_default_evaluator = Evaluator()


def get_default_evaluator() -> Evaluator:
    """Returns the global evaluator instance."""
    return _default_evaluator


def set_default_evaluator(evaluator: Evaluator) -> Evaluator:
    """Replaces the global evaluator and returns the previous one."""
    global _default_evaluator
    previous = _default_evaluator
    _default_evaluator = evaluator
    return previous


def evaluate(graph: Graph, tensor_dict: Mapping[str, Any], target: Target) -> Tensor:
    """Evaluates ``target`` with the global evaluator."""
    return get_default_evaluator().evaluate(graph, tensor_dict, target)
