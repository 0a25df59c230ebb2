"""Two-dimensional batch normalisation with an affine transform."""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence

import numpy as np

from kuiperinfer.layer import InferError, InferStatus, ParamLayer
from kuiperinfer.tensor import Tensor


class BatchNorm2dLayer(ParamLayer):
    """Normalises each channel with its running mean and variance.

    The running means are kept as the layer's weights and the running
    variances as its bias, one 1x1x1 tensor per channel.
    """

    def __init__(
        self,
        num_features: int,
        eps: float = 1e-5,
        affine_weight: Sequence[float] = (),
        affine_bias: Sequence[float] = (),
    ) -> None:
        super().__init__("Batchnorm")
        self.eps = float(eps)
        self.affine_weight = [float(v) for v in affine_weight]
        self.affine_bias = [float(v) for v in affine_bias]
        self.init_weight_param(num_features, 1, 1, 1)
        self.init_bias_param(num_features, 1, 1, 1)

    def _validate(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> None:
        if not inputs:
            raise InferError(
                InferStatus.FAILED_INPUT_EMPTY,
                "The input feature map of batchnorm layer is empty",
            )
        if len(inputs) != len(outputs):
            raise InferError(
                InferStatus.FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR,
                "The input and output size is not adapting",
            )
        if len(self._weights) != len(self._bias):
            raise InferError(
                InferStatus.FAILED_WEIGHT_PARAMETER_ERROR,
                "BatchNorm2d layer do not have the same mean values and bias values",
            )
        if len(self.affine_bias) != len(self.affine_weight):
            raise InferError(
                InferStatus.FAILED_WEIGHT_PARAMETER_ERROR,
                "BatchNorm2d layer do not have the same affine weight and bias values",
            )
        for input_data, output_data in zip(inputs, outputs):
            if input_data is None or input_data.empty():
                raise InferError(
                    InferStatus.FAILED_INPUT_EMPTY,
                    "The input feature map of batchNorm2d layer is empty",
                )
            if output_data is not None and not output_data.empty():
                if input_data.shapes() != output_data.shapes():
                    raise InferError(
                        InferStatus.FAILED_INPUT_OUT_SIZE_ADAPTING_ERROR,
                        "The input and output size is not adapting",
                    )

    def _channel_params(self) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        for mean, var in zip(self._weights, self._bias):
            if mean.size() != 1 or var.size() != 1:
                raise ValueError("mean and variance must hold one value per channel")

        def column(values) -> np.ndarray:
            return np.asarray(values, dtype=np.float32).reshape(-1, 1, 1)

        means = column([t.index(0) for t in self._weights])
        variances = column([t.index(0) for t in self._bias])
        return means, variances, column(self.affine_weight), column(self.affine_bias)

    def forward(
        self,
        inputs: Sequence[Tensor | None],
        outputs: MutableSequence[Tensor | None],
    ) -> MutableSequence[Tensor | None]:
        """Normalise every input into ``outputs``, creating missing output tensors."""
        self._validate(inputs, outputs)
        means, variances, scale, shift = self._channel_params()
        deviation = np.sqrt(variances + np.float32(self.eps))
        for number, input_data in enumerate(inputs):
            channels = input_data.channels()
            if channels != len(self._weights):
                raise ValueError(
                    "The channel of of input and mean value mat is not equal"
                )
            if channels != len(self.affine_weight):
                raise ValueError("The channel of input and affine weight is not equal")
            output = outputs[number]
            if output is None or output.empty():
                output = Tensor.from_shapes(input_data.shapes())
                outputs[number] = output
            if output.shapes() != input_data.shapes():
                raise ValueError("The output size of batchnorm is error")
            output.set_data((input_data.data() - means) / deviation * scale + shift)
        return outputs