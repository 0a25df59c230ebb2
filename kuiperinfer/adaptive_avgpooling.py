"""Adaptive average pooling to a fixed output height and width."""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from kuiperinfer.layer import InferError, InferStatus, Layer
from kuiperinfer.tensor import Tensor


class AdaptiveAveragePoolingLayer(Layer):
    """Average pooling whose window and stride are chosen from the output size."""

    def __init__(self, output_h: int, output_w: int) -> None:
        super().__init__("AdaptiveAveragePooling")
        self.output_h = output_h
        self.output_w = output_w

    def _validate(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> None:
        if not inputs:
            raise InferError(
                InferStatus.FAILED_INPUT_EMPTY,
                "The input feature map of adaptive pooling layer is empty",
            )
        if len(inputs) != len(outputs):
            raise InferError(
                InferStatus.FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR,
                "The input and output size of adaptive pooling layer is not adapting",
            )
        if self.output_w <= 0 or self.output_h <= 0:
            raise InferError(
                InferStatus.FAILED_OUTPUT_SIZE_ERROR,
                "The output size of adaptive pooling is less than zero",
            )
        for input_data, output_data in zip(inputs, outputs):
            if input_data is None or input_data.empty():
                raise InferError(
                    InferStatus.FAILED_INPUT_EMPTY,
                    "The input feature map of adaptive pooling layer is empty",
                )
            if output_data is not None and not output_data.empty():
                if (
                    output_data.rows() != self.output_h
                    or output_data.cols() != self.output_w
                ):
                    raise InferError(
                        InferStatus.FAILED_OUTPUT_SIZE_ERROR,
                        "The output size of adaptive pooling is not adapting",
                    )

    def _pool(self, input_data: Tensor) -> np.ndarray:
        input_h, input_w = input_data.rows(), input_data.cols()
        stride_h = input_h // self.output_h
        stride_w = input_w // self.output_w
        if stride_h <= 0 or stride_w <= 0:
            raise ValueError(
                "The stride parameter is set incorrectly. "
                "It must always be greater than 0"
            )
        pooling_h = input_h - (self.output_h - 1) * stride_h
        pooling_w = input_w - (self.output_w - 1) * stride_w
        windows = sliding_window_view(
            input_data.data(), (pooling_h, pooling_w), axis=(1, 2)
        )[:, ::stride_h, ::stride_w]
        return windows.mean(axis=(-2, -1), dtype=np.float32)

    def forward(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> MutableSequence[Tensor | None]:
        """Pool every input into ``outputs``, creating missing output tensors."""
        self._validate(inputs, outputs)
        for number, input_data in enumerate(inputs):
            pooled = self._pool(input_data)
            output = outputs[number]
            if output is None or output.empty():
                output = Tensor(input_data.channels(), self.output_h, self.output_w)
                outputs[number] = output
            if output.shapes() != list(pooled.shape):
                raise ValueError("The output size of adaptive pooling is error")
            output.set_data(pooled)
        return outputs