"""Concatenation of feature maps along the channel dimension."""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence

import numpy as np

from kuiperinfer.layer import InferError, InferStatus, Layer
from kuiperinfer.tensor import Tensor


class CatLayer(Layer):
    """Joins groups of inputs along the channel axis.

    With ``n`` outputs, output ``i`` is built from inputs ``i``, ``i + n``,
    ``i + 2n`` and so on, taken in that order.
    """

    def __init__(self, dim: int) -> None:
        super().__init__("cat")
        self.dim = int(dim)

    def _validate(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> int:
        if not inputs:
            raise InferError(
                InferStatus.FAILED_INPUT_EMPTY,
                "The input feature map of cat layer is empty",
            )
        if len(inputs) == len(outputs) or not outputs:
            raise InferError(
                InferStatus.FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR,
                "The input and output size is not adapting",
            )
        if self.dim not in (1, -3):
            raise InferError(
                InferStatus.FAILED_DIMENSION_PARAMETER_ERROR,
                "The dimension of cat layer is error",
            )
        if len(inputs) % len(outputs):
            raise ValueError(
                f"{len(inputs)} inputs do not split into {len(outputs)} outputs"
            )
        packet_size = len(inputs) // len(outputs)

        for input_data, output_data in zip(inputs, outputs):
            if input_data is None or input_data.empty():
                raise InferError(
                    InferStatus.FAILED_INPUT_EMPTY,
                    "The input feature map of cat layer is empty",
                )
            if output_data is None or output_data.empty():
                continue
            if input_data.channels() * packet_size != output_data.channels():
                raise InferError(
                    InferStatus.FAILED_CHANNEL_PARAMETER_ERROR,
                    "The channel of input and output feature map is not adapting",
                )
            if (
                input_data.rows() != output_data.rows()
                or input_data.cols() != output_data.cols()
            ):
                raise InferError(
                    InferStatus.FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR,
                    "The size of input and output feature map is not adapting",
                )
        return packet_size

    def forward(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> MutableSequence[Tensor | None]:
        """Concatenate the inputs into ``outputs``, creating missing output tensors."""
        packet_size = self._validate(inputs, outputs)
        output_count = len(outputs)
        first = inputs[0]
        rows, cols = first.rows(), first.cols()

        for number in range(output_count):
            group = inputs[number::output_count]
            output = outputs[number]
            for input_data in group:
                if input_data is None or input_data.empty():
                    raise ValueError("The input feature map of cat layer is empty")
                if input_data.rows() != rows or input_data.cols() != cols:
                    raise ValueError("The inputs of cat layer differ in size")
                if output is None or output.empty():
                    output = Tensor(input_data.channels() * packet_size, rows, cols)
                    outputs[number] = output
                if output.shapes() != [
                    input_data.channels() * packet_size,
                    rows,
                    cols,
                ]:
                    raise ValueError("The output size of cat layer is error")
            output.set_data(np.concatenate([t.data() for t in group], axis=0))
        return outputs