import threading
from typing import Dict, Iterable, Sequence, Tuple

from .errors import InternalInvariantError
from .tensor import Tensor


class EvaluationCache:
    """
    Outputs computed during a single evaluation run.

    The cache maps ``(node, output)`` to the produced Tensor. Every required
    node owns a one-shot completion latch which is set once its outputs are
    stored (or once it failed), so a parallel run can wait for exactly the
    nodes it reads from without a global lock.

    A cache is created at the start of a run and dropped when the run ends.
    """

    def __init__(self, nodes: Iterable[int] = ()):
        self._entries: Dict[Tuple[int, int], Tensor] = {}
        self._latches: Dict[int, threading.Event] = {node: threading.Event() for node in nodes}
        self._failed: Dict[int, bool] = {}

    def put(self, node: int, outputs: Sequence[Tensor]) -> None:
        """Stores all outputs of ``node`` and releases anyone waiting on it."""
        for output, tensor in enumerate(outputs):
            self._entries[(node, output)] = tensor
        self._latch(node).set()

    def mark_failed(self, node: int) -> None:
        """Releases waiters of a node whose computation raised."""
        self._failed[node] = True
        self._latch(node).set()

    def wait(self, node: int) -> bool:
        """
        Blocks until ``node`` completed.

        Returns:
            True if the node stored its outputs, False if it failed
        """
        self._latch(node).wait()
        return not self._failed.get(node, False)

    def get(self, node: int, output: int = 0) -> Tensor:
        """
        Returns a stored output.

        Raises:
            InternalInvariantError: If the output was never stored; topological
                ordering guarantees this cannot happen for a dependency
        """
        try:
            return self._entries[(node, output)]
        except KeyError:
            raise InternalInvariantError(
                f"Output ({node}, {output}) was read before it was computed"
            ) from None

    def _latch(self, node: int) -> threading.Event:
        try:
            return self._latches[node]
        except KeyError:
            raise InternalInvariantError(f"Node {node} is not part of this evaluation") from None

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
