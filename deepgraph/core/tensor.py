from numbers import Number
from typing import Any, List, Optional, Tuple, Union

import numpy as np
from numpy.typing import DTypeLike, NDArray


class Tensor:
    """
    An immutable multidimensional array.

    The Tensor class wraps a numpy array. The data is copied when the tensor is
    created and the copy is flagged read-only, so a tensor never changes after it
    has been produced and can be shared freely between evaluation runs and threads.

    Attributes:
        data: The underlying read-only numpy array holding the tensor's values
    """

    __slots__ = ("data",)

    def __init__(
        self,
        data: Union["Tensor", NDArray[Any], List[Any], Number],
        dtype: Optional[DTypeLike] = None,
    ):
        if isinstance(data, Tensor):
            data = data.data
        # Always copy so callers keep no writable alias to our storage
        array = np.array(data, dtype=dtype, copy=True)
        if not np.issubdtype(array.dtype, np.number) and array.dtype != np.bool_:
            raise TypeError(f"Tensor data must be numeric, got dtype {array.dtype}")
        array.setflags(write=False)
        self.data = array

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(int(x) for x in self.data.shape)

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def ndim(self) -> int:
        return self.data.ndim

    @property
    def size(self) -> int:
        return int(self.data.size)

    def __len__(self) -> int:
        """Return length of first dimension."""
        return self.data.shape[0] if self.data.shape else 1

    def __array__(self, dtype: Optional[DTypeLike] = None, copy: Optional[bool] = None) -> NDArray[Any]:
        if dtype is not None and np.dtype(dtype) != self.data.dtype:
            return self.data.astype(dtype)
        if copy:
            return self.data.copy()
        return self.data

    def __repr__(self) -> str:
        return f"Tensor({self.data.tolist()}, shape={self.shape}, dtype={self.dtype})"

    def numpy(self) -> NDArray[Any]:
        """Returns the underlying (read-only) numpy array."""
        return self.data

    def tolist(self) -> Any:
        return self.data.tolist()

    @classmethod
    def from_numpy(cls, array: NDArray[Any]) -> "Tensor":
        """Creates a Tensor from a numpy array."""
        return cls(array)

    def identical(self, other: "Tensor") -> bool:
        """Returns True if both tensors have the same shape, dtype and bytes."""
        return (
            self.shape == other.shape
            and self.dtype == other.dtype
            and self.data.tobytes() == other.data.tobytes()
        )
