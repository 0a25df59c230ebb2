"""Float tensors stored as channels x rows x columns."""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Callable, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_DTYPE = np.float32
_RNG = np.random.default_rng()


def _raw_shapes_for(channels: int, rows: int, cols: int) -> list[int]:
    if channels == 1 and rows == 1:
        return [cols]
    if channels == 1:
        return [rows, cols]
    return [channels, rows, cols]


def _check_index(name: str, value: int, limit: int) -> None:
    if not 0 <= value < limit:
        raise IndexError(f"{name} {value} is out of range for size {limit}")


class Tensor:
    """A dense float32 tensor with shape (channels, rows, cols).

    Flat offsets (``index``) and raw reshapes follow the column-major
    element order within each channel, channels one after another.
    """

    __slots__ = ("_data", "_raw_shapes")

    def __init__(self, channels: int, rows: int, cols: int) -> None:
        self._data = np.zeros((channels, rows, cols), dtype=_DTYPE)
        self._raw_shapes = _raw_shapes_for(channels, rows, cols)

    @classmethod
    def from_shapes(cls, shapes: Sequence[int]) -> Tensor:
        """Create a tensor from ``[channels, rows, cols]``."""
        if len(shapes) != 3:
            raise ValueError(f"expected three dimensions, got {list(shapes)}")
        return cls(*(int(s) for s in shapes))

    @classmethod
    def _wrap(cls, data: np.ndarray, raw_shapes: list[int]) -> Tensor:
        tensor = cls.__new__(cls)
        tensor._data = np.ascontiguousarray(data, dtype=_DTYPE)
        tensor._raw_shapes = list(raw_shapes)
        return tensor

    def _check_not_empty(self) -> None:
        if self._data.size == 0:
            raise ValueError("tensor is empty")

    def rows(self) -> int:
        self._check_not_empty()
        return self._data.shape[1]

    def cols(self) -> int:
        self._check_not_empty()
        return self._data.shape[2]

    def channels(self) -> int:
        self._check_not_empty()
        return self._data.shape[0]

    def size(self) -> int:
        self._check_not_empty()
        return int(self._data.size)

    def empty(self) -> bool:
        return self._data.size == 0

    def shapes(self) -> list[int]:
        """Return ``[channels, rows, cols]``."""
        self._check_not_empty()
        return list(self._data.shape)

    def raw_shapes(self) -> list[int]:
        """Return the logical shape the tensor was last given."""
        if not self._raw_shapes:
            raise ValueError("raw shapes are empty")
        return list(self._raw_shapes)

    def data(self) -> np.ndarray:
        """Return the underlying (channels, rows, cols) array."""
        return self._data

    def set_data(self, data) -> None:
        array = np.asarray(data, dtype=_DTYPE)
        if array.shape != self._data.shape:
            raise ValueError(
                f"data shape {array.shape} does not match {self._data.shape}"
            )
        self._data = np.array(array, dtype=_DTYPE, copy=True)

    def index(self, offset: int) -> float:
        """Return the element at a flat column-major offset."""
        _check_index("offset", offset, self._data.size)
        _, rows, _ = self._data.shape
        channel, rest = divmod(offset, rows * self._data.shape[2])
        col, row = divmod(rest, rows)
        return float(self._data[channel, row, col])

    def at(self, channel: int, row: int, col: int) -> float:
        channels, rows, cols = self._data.shape
        _check_index("row", row, rows)
        _check_index("col", col, cols)
        _check_index("channel", channel, channels)
        return float(self._data[channel, row, col])

    def channel(self, channel: int) -> np.ndarray:
        """Return a writable (rows, cols) view of one channel."""
        _check_index("channel", channel, self._data.shape[0])
        return self._data[channel]

    def padding(self, pads: Sequence[int], padding_value: float = 0.0) -> None:
        """Pad every channel in place by ``[top, bottom, left, right]``."""
        self._check_not_empty()
        if len(pads) != 4:
            raise ValueError("padding needs exactly four values")
        top, bottom, left, right = (int(p) for p in pads)
        self._data = np.pad(
            self._data,
            ((0, 0), (top, bottom), (left, right)),
            mode="constant",
            constant_values=padding_value,
        ).astype(_DTYPE)

    def fill(self, value) -> None:
        """Fill with a scalar, or with values given row by row per channel."""
        self._check_not_empty()
        if isinstance(value, (numbers.Real, np.number)):
            self._data.fill(value)
            return
        values = np.asarray(list(value), dtype=_DTYPE)
        if values.size != self._data.size:
            raise ValueError(
                f"expected {self._data.size} values, got {values.size}"
            )
        self._data = values.reshape(self._data.shape).copy()

    def show(self) -> None:
        for number, plane in enumerate(self._data):
            logger.info("Channel: %d", number)
            logger.info("\n%s", plane)

    def flatten(self) -> None:
        self._check_not_empty()
        self.reshape([self.size()])

    def clone(self) -> Tensor:
        return Tensor._wrap(self._data.copy(), self._raw_shapes)

    def rand(self) -> None:
        """Fill with samples from the standard normal distribution."""
        self._check_not_empty()
        self._data = _RNG.standard_normal(self._data.shape).astype(_DTYPE)

    def ones(self) -> None:
        self.fill(1.0)

    def transform(self, func: Callable[[float], float]) -> None:
        """Apply ``func`` to every element."""
        self._check_not_empty()
        self._data = np.vectorize(func, otypes=[_DTYPE])(self._data)

    def _validated(self, shapes: Sequence[int]) -> list[int]:
        self._check_not_empty()
        shapes = [int(s) for s in shapes]
        if not shapes:
            raise ValueError("target shape is empty")
        if len(shapes) > 3:
            raise ValueError("at most three dimensions are supported")
        if math.prod(shapes) != self._data.size:
            raise ValueError(
                f"shape {shapes} does not hold {self._data.size} elements"
            )
        return shapes

    @staticmethod
    def _target(shapes: list[int]) -> tuple[int, int, int]:
        if len(shapes) == 3:
            return shapes[0], shapes[1], shapes[2]
        if len(shapes) == 2:
            return 1, shapes[0], shapes[1]
        return 1, shapes[0], 1

    def reshape(self, shapes: Sequence[int]) -> None:
        """Reshape keeping the column-major element order."""
        shapes = self._validated(shapes)
        channels, rows, cols = self._target(shapes)
        memory = np.transpose(self._data, (0, 2, 1)).reshape(-1)
        self._data = np.ascontiguousarray(
            memory.reshape(channels, cols, rows).transpose(0, 2, 1)
        )
        self._raw_shapes = shapes

    def reshape_view(self, shapes: Sequence[int]) -> None:
        """Reshape keeping the row-major element order."""
        shapes = self._validated(shapes)
        self._raw_shapes = shapes
        self.review(list(self._target(shapes)))

    def review(self, shapes: Sequence[int]) -> None:
        """Rearrange into ``[channels, rows, cols]`` in row-major order."""
        self._check_not_empty()
        if len(shapes) != 3:
            raise ValueError("review needs exactly three dimensions")
        self._data = np.ascontiguousarray(
            self._data.reshape([int(s) for s in shapes])
        )


def tensor_is_same(a: Tensor, b: Tensor) -> bool:
    """True when shapes match and elements differ by at most 1e-5."""
    if a.shapes() != b.shapes():
        return False
    return bool(np.all(np.abs(a.data() - b.data()) <= 1e-5))


def tensor_create(channels: int, rows: int, cols: int) -> Tensor:
    return Tensor(channels, rows, cols)


def _elementwise(op, tensor1: Tensor, tensor2: Tensor, output: Tensor | None) -> Tensor:
    if tensor1.shapes() == tensor2.shapes():
        left, right = tensor1, tensor2
    else:
        if tensor1.channels() != tensor2.channels():
            raise ValueError("Tensors shape are not adapting")
        left, right = tensor_broadcast(tensor1, tensor2)
    if output is None:
        output = tensor_create(*left.shapes())
    elif output.shapes() != left.shapes():
        raise ValueError("output tensor shape is not adapting")
    output.set_data(op(left.data(), right.data()))
    return output


def tensor_element_add(tensor1: Tensor, tensor2: Tensor, output: Tensor | None = None) -> Tensor:
    """Add two tensors, broadcasting a 1x1 operand; fills and returns ``output``."""
    return _elementwise(np.add, tensor1, tensor2, output)


def tensor_element_multiply(tensor1: Tensor, tensor2: Tensor, output: Tensor | None = None) -> Tensor:
    """Multiply two tensors element-wise, broadcasting a 1x1 operand."""
    return _elementwise(np.multiply, tensor1, tensor2, output)


def tensor_padding(tensor: Tensor, pads: Sequence[int], padding_value: float = 0.0) -> Tensor:
    """Return a padded copy of ``tensor``; pads are ``[top, bottom, left, right]``."""
    if tensor.empty():
        raise ValueError("tensor is empty")
    if len(pads) != 4:
        raise ValueError("padding needs exactly four values")
    top, bottom, left, right = (int(p) for p in pads)
    output = Tensor(
        tensor.channels(), tensor.rows() + top + bottom, tensor.cols() + left + right
    )
    output.set_data(
        np.pad(
            tensor.data(),
            ((0, 0), (top, bottom), (left, right)),
            mode="constant",
            constant_values=padding_value,
        )
    )
    return output


def _expand(small: Tensor, rows: int, cols: int) -> Tensor:
    expanded = tensor_create(small.channels(), rows, cols)
    expanded.data()[...] = small.data()[:, :1, :1]
    return expanded


def tensor_broadcast(s1: Tensor, s2: Tensor) -> tuple[Tensor, Tensor]:
    """Expand a per-channel 1x1 tensor to the shape of the other."""
    if s1.shapes() == s2.shapes():
        return s1, s2
    if s1.channels() != s2.channels():
        raise ValueError("Broadcast channels are not adapting")
    if s2.rows() == 1 and s2.cols() == 1:
        return s1, _expand(s2, s1.rows(), s1.cols())
    if s1.rows() == 1 and s1.cols() == 1:
        return _expand(s1, s2.rows(), s2.cols()), s2
    raise ValueError("Broadcast shape is not adapting!")