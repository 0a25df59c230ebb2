"""Base classes for inference layers and their parameters."""

from __future__ import annotations

import enum
from collections.abc import Iterable, MutableSequence, Sequence

import numpy as np

from kuiperinfer.tensor import Tensor


class InferStatus(enum.Enum):
    """Outcome of a layer's forward pass."""

    UNKNOWN = -1
    SUCCESS = 0
    FAILED_INPUT_EMPTY = 1
    FAILED_WEIGHT_PARAMETER_ERROR = 2
    FAILED_BIAS_PARAMETER_ERROR = 3
    FAILED_STRIDE_PARAMETER_ERROR = 4
    FAILED_DIMENSION_PARAMETER_ERROR = 5
    FAILED_CHANNEL_PARAMETER_ERROR = 6
    FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR = 7
    FAILED_OUTPUT_SIZE_ERROR = 8


class InferError(Exception):
    """Raised when a forward pass cannot run; carries an ``InferStatus``."""

    def __init__(self, status: InferStatus, message: str) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        return f"{self.status.name}: {self.args[0]}"


class Layer:
    """A computation step mapping input tensors to output tensors."""

    def __init__(self, layer_name: str) -> None:
        self.layer_name = layer_name

    def _unsupported(self, what: str) -> TypeError:
        return TypeError(f"{self.layer_name} layer does not support {what}")

    def weights(self) -> list[Tensor]:
        raise self._unsupported("weights")

    def bias(self) -> list[Tensor]:
        raise self._unsupported("bias")

    def set_weights(self, weights) -> None:
        raise self._unsupported("setting weights")

    def set_bias(self, bias) -> None:
        raise self._unsupported("setting bias")

    def forward(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> MutableSequence[Tensor | None]:
        """Compute ``outputs`` from ``inputs`` in place and return them."""
        raise self._unsupported("forward")


def _make_tensors(count: int, channels: int, rows: int, cols: int) -> list[Tensor]:
    return [Tensor(channels, rows, cols) for _ in range(count)]


def _assign_params(current: list[Tensor], values, kind: str) -> list[Tensor]:
    """Replace parameter tensors, or fill the existing ones from flat values."""
    if isinstance(values, np.ndarray):
        flat = values.astype(np.float32).ravel()
    else:
        items = list(values)
        if all(isinstance(item, Tensor) for item in items):
            if current:
                if len(items) != len(current):
                    raise ValueError(
                        f"expected {len(current)} {kind} tensors, got {len(items)}"
                    )
                for old, new in zip(current, items):
                    if old.shapes() != new.shapes():
                        raise ValueError(
                            f"{kind} shape {new.shapes()} does not match {old.shapes()}"
                        )
            return items
        flat = np.asarray(items, dtype=np.float32).ravel()

    total = sum(tensor.size() for tensor in current)
    if total != flat.size:
        raise ValueError(f"expected {total} {kind} values, got {flat.size}")
    if not current:
        return current
    count = len(current)
    if flat.size % count:
        raise ValueError(f"{flat.size} {kind} values do not split into {count} tensors")
    blob = flat.size // count
    for number, tensor in enumerate(current):
        tensor.fill(flat[number * blob:(number + 1) * blob])
    return current


class ParamLayer(Layer):
    """A layer that holds weight and bias tensors."""

    def __init__(self, layer_name: str) -> None:
        super().__init__(layer_name)
        self._weights: list[Tensor] = []
        self._bias: list[Tensor] = []

    def init_bias_param(
        self, param_count: int, param_channel: int, param_height: int, param_width: int
    ) -> None:
        self._bias = _make_tensors(param_count, param_channel, param_height, param_width)

    def init_weight_param(
        self, param_count: int, param_channel: int, param_height: int, param_width: int
    ) -> None:
        self._weights = _make_tensors(
            param_count, param_channel, param_height, param_width
        )

    def weights(self) -> list[Tensor]:
        return list(self._weights)

    def bias(self) -> list[Tensor]:
        return list(self._bias)

    def set_weights(self, weights: Iterable[Tensor] | Iterable[float]) -> None:
        """Set weight tensors, or fill the existing ones from a flat list of values."""
        self._weights = _assign_params(self._weights, weights, "weight")

    def set_bias(self, bias: Iterable[Tensor] | Iterable[float]) -> None:
        """Set bias tensors, or fill the existing ones from a flat list of values."""
        self._bias = _assign_params(self._bias, bias, "bias")