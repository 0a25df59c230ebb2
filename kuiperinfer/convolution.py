"""Two-dimensional convolution with zero padding, strides and groups."""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from kuiperinfer.layer import InferError, InferStatus, ParamLayer
from kuiperinfer.tensor import Tensor, tensor_padding


class ConvolutionLayer(ParamLayer):
    """Convolution with one weight tensor per output channel.

    Each weight has shape ``(in_channel / groups, kernel_h, kernel_w)``;
    the bias, when used, holds one 1x1x1 tensor per output channel.
    """

    def __init__(
        self,
        output_channel: int,
        in_channel: int,
        kernel_h: int,
        kernel_w: int,
        padding_h: int,
        padding_w: int,
        stride_h: int,
        stride_w: int,
        groups: int,
        use_bias: bool = True,
    ) -> None:
        super().__init__("Convolution")
        if groups <= 0:
            raise ValueError("groups must be greater than zero")
        self.use_bias = bool(use_bias)
        self.groups = int(groups)
        self.padding_h = int(padding_h)
        self.padding_w = int(padding_w)
        self.stride_h = int(stride_h)
        self.stride_w = int(stride_w)
        if self.groups != 1:
            in_channel //= self.groups
        self.init_weight_param(output_channel, in_channel, kernel_h, kernel_w)
        if self.use_bias:
            self.init_bias_param(output_channel, 1, 1, 1)

    def _validate(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> None:
        if not inputs:
            raise InferError(
                InferStatus.FAILED_INPUT_EMPTY,
                "The input feature map of convolution layer is empty",
            )
        if len(inputs) != len(outputs):
            raise InferError(
                InferStatus.FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR,
                "The input and output size is not adapting",
            )
        if not self._weights:
            raise InferError(
                InferStatus.FAILED_WEIGHT_PARAMETER_ERROR,
                "Weight parameters is empty",
            )
        if self.use_bias and len(self._bias) != len(self._weights):
            raise InferError(
                InferStatus.FAILED_BIAS_PARAMETER_ERROR,
                "The size of the weight and bias is not adapting",
            )
        if self.stride_h <= 0 or self.stride_w <= 0:
            raise InferError(
                InferStatus.FAILED_STRIDE_PARAMETER_ERROR,
                "The stride parameter is set incorrectly. "
                "It must always be greater than 0",
            )

    def _kernels(self) -> np.ndarray:
        shape = self._weights[0].shapes()
        for kernel in self._weights:
            if kernel.shapes() != shape:
                raise ValueError("all kernels must have the same shape")
        kernel_count = len(self._weights)
        if kernel_count % self.groups:
            raise ValueError("kernel count is not divisible by groups")
        return np.stack([kernel.data() for kernel in self._weights])

    def _biases(self, kernel_count: int) -> np.ndarray | None:
        if not (self.use_bias and self._bias):
            return None
        values = [tensor.index(0) for tensor in self._bias[:kernel_count]]
        return np.asarray(values, dtype=np.float32).reshape(-1, 1, 1)

    def _convolve(self, input_data: Tensor, kernels: np.ndarray) -> np.ndarray:
        kernel_count, kernel_c, kernel_h, kernel_w = kernels.shape
        if self.padding_h > 0 or self.padding_w > 0:
            padded = tensor_padding(
                input_data,
                [self.padding_h, self.padding_h, self.padding_w, self.padding_w],
                0.0,
            )
        else:
            padded = input_data
        data = padded.data()
        input_c, input_h, input_w = data.shape
        if input_h < kernel_h or input_w < kernel_w:
            raise ValueError("The size of the output feature map is less than zero")
        if input_c % self.groups:
            raise ValueError("input channels are not divisible by groups")
        input_c_group = input_c // self.groups
        if input_c_group != kernel_c:
            raise ValueError(
                "The channel of the kernel and input feature do not equal"
            )

        windows = sliding_window_view(data, (kernel_h, kernel_w), axis=(1, 2))[
            :, :: self.stride_h, :: self.stride_w
        ]
        kernel_count_group = kernel_count // self.groups
        pieces = []
        for group in range(self.groups):
            group_windows = windows[group * input_c_group:(group + 1) * input_c_group]
            group_kernels = kernels[
                group * kernel_count_group:(group + 1) * kernel_count_group
            ]
            pieces.append(
                np.einsum(
                    "chwij,kcij->khw",
                    group_windows,
                    group_kernels,
                    dtype=np.float32,
                )
            )
        return np.concatenate(pieces, axis=0)

    def forward(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> MutableSequence[Tensor | None]:
        """Convolve every input into ``outputs``, creating missing output tensors."""
        self._validate(inputs, outputs)
        kernels = self._kernels()
        biases = self._biases(kernels.shape[0])
        for number, input_data in enumerate(inputs):
            if input_data is None or input_data.empty():
                raise ValueError("The input feature map of conv layer is empty")
            result = self._convolve(input_data, kernels)
            if biases is not None:
                result = result + biases
            output = outputs[number]
            if output is None or output.empty():
                output = Tensor(*result.shape)
                outputs[number] = output
            if output.shapes() != list(result.shape):
                raise ValueError("The output size of convolution is error")
            output.set_data(result)
        return outputs