from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

from .errors import MissingKey
from .tensor import Tensor


class TensorDict(Mapping):
    """
    Named tensors that feed a graph evaluation.

    A TensorDict maps string keys to Tensors. It is populated with ``insert``
    before evaluation and read with ``get``. The evaluator works on a
    ``snapshot`` taken when a run starts, so inserting new entries never
    affects a run that is already in progress.

    Example:
        >>> feeds = TensorDict(x=[1.0, 2.0, 3.0])
        >>> feeds.get("x").shape
        (3,)
    """

    def __init__(self, tensors: Optional[Mapping] = None, **kwargs: Any):
        self._tensors: Dict[str, Tensor] = {}
        for key, value in dict(tensors or {}, **kwargs).items():
            self.insert(key, value)

    def insert(self, key: str, tensor: Any) -> None:
        """
        Stores a tensor under the given key, replacing any previous entry.

        Args:
            key: Name the graph refers to through ``FromDict(key)``
            tensor: A Tensor, or anything ``Tensor`` accepts (arrays, lists, scalars)

        Raises:
            TypeError: If the key is not a string
        """
        if not isinstance(key, str):
            raise TypeError(f"TensorDict keys must be str, got {type(key).__name__}")
        if not isinstance(tensor, Tensor):
            tensor = Tensor(tensor)
        self._tensors[key] = tensor

    def get(self, key: str) -> Tensor:  # type: ignore[override]
        """
        Returns the tensor stored under ``key``.

        Raises:
            MissingKey: If nothing is stored under ``key``. No default is ever returned.
        """
        try:
            return self._tensors[key]
        except KeyError:
            raise MissingKey(key) from None

    def __getitem__(self, key: str) -> Tensor:
        return self.get(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tensors)

    def __len__(self) -> int:
        return len(self._tensors)

    def __contains__(self, key: object) -> bool:
        return key in self._tensors

    def snapshot(self) -> "TensorDict":
        """Returns a shallow copy; tensors are immutable so they are shared."""
        copy = TensorDict.__new__(TensorDict)
        copy._tensors = dict(self._tensors)
        return copy

    def __repr__(self) -> str:
        entries = ", ".join(f"{key!r}: {tensor.shape}" for key, tensor in self._tensors.items())
        return f"TensorDict({{{entries}}})"
