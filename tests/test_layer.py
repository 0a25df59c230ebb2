import pytest

from kuiperinfer.layer import InferError, InferStatus, Layer, ParamLayer
from kuiperinfer.tensor import Tensor


def test_set_weight1():
    param_layer = ParamLayer("param")
    weights = [Tensor(3, 32, 32) for _ in range(4)]
    for number, weight in enumerate(weights):
        weight.fill(float(number))
    param_layer.set_weights(weights)
    stored = param_layer.weights()
    assert len(stored) == 4
    for weight, weight_ in zip(weights, stored):
        assert weight.size() == weight_.size()
        assert (weight.data() == weight_.data()).all()


def test_set_bias1():
    param_layer = ParamLayer("param")
    biases = [Tensor(1, 32, 1) for _ in range(4)]
    param_layer.set_bias(biases)
    stored = param_layer.bias()
    assert len(stored) == len(biases)
    for bias, bias_ in zip(biases, stored):
        assert bias.size() == bias_.size()
        assert all(bias.index(i) == bias_.index(i) for i in range(bias.size()))


def test_set_weight2():
    param_layer = ParamLayer("param")
    param_layer.set_weights([Tensor(1, 3, 3)])
    param_layer.set_weights([float(i) for i in range(9)])
    (weight,) = param_layer.weights()
    expected = 0
    for r in range(3):
        for c in range(3):
            assert weight.at(0, r, c) == expected
            expected += 1


def test_set_bias2():
    param_layer = ParamLayer("param")
    param_layer.set_bias([Tensor(1, 9, 1)])
    param_layer.set_bias([float(i) for i in range(9)])
    (bias,) = param_layer.bias()
    for r in range(9):
        assert bias.at(0, r, 0) == r


def test_init_bias():
    param_layer = ParamLayer("param")
    param_layer.init_bias_param(3, 64, 1, 1)
    bias = param_layer.bias()
    assert len(bias) == 3
    for tensor in bias:
        assert tensor.shapes() == [64, 1, 1]


def test_init_weight():
    param_layer = ParamLayer("param")
    param_layer.init_weight_param(3, 64, 32, 32)
    weight = param_layer.weights()
    assert len(weight) == 3
    for tensor in weight:
        assert tensor.shapes() == [64, 32, 32]


def test_flat_values_split_between_tensors():
    param_layer = ParamLayer("param")
    param_layer.init_weight_param(2, 1, 1, 2)
    param_layer.set_weights([1.0, 2.0, 3.0, 4.0])
    first, second = param_layer.weights()
    assert [first.at(0, 0, 0), first.at(0, 0, 1)] == [1.0, 2.0]
    assert [second.at(0, 0, 0), second.at(0, 0, 1)] == [3.0, 4.0]


def test_flat_values_wrong_count_raises():
    param_layer = ParamLayer("param")
    param_layer.init_bias_param(2, 1, 1, 1)
    with pytest.raises(ValueError):
        param_layer.set_bias([1.0, 2.0, 3.0])


def test_tensor_count_mismatch_raises():
    param_layer = ParamLayer("param")
    param_layer.init_weight_param(2, 1, 3, 3)
    with pytest.raises(ValueError):
        param_layer.set_weights([Tensor(1, 3, 3)])


def test_tensor_shape_mismatch_raises():
    param_layer = ParamLayer("param")
    param_layer.init_bias_param(1, 1, 3, 3)
    with pytest.raises(ValueError):
        param_layer.set_bias([Tensor(2, 3, 3)])


def test_weights_list_is_a_copy():
    param_layer = ParamLayer("param")
    param_layer.init_weight_param(2, 1, 1, 1)
    param_layer.weights().clear()
    assert len(param_layer.weights()) == 2


class _Plain(Layer):
    def forward(self, inputs, outputs):
        outputs[:] = list(inputs)
        return outputs


def test_base_layer_has_no_parameters():
    layer = _Plain("plain")
    with pytest.raises(TypeError, match="plain"):
        Layer.weights(layer)
    with pytest.raises(TypeError, match="plain"):
        Layer.bias(layer)
    with pytest.raises(TypeError, match="plain"):
        Layer.set_weights(layer, [1.0])
    with pytest.raises(TypeError, match="plain"):
        Layer.set_bias(layer, [1.0])


def test_param_layer_forward_unsupported():
    with pytest.raises(TypeError, match="param"):
        ParamLayer("param").forward([Tensor(1, 1, 1)], [None])


def test_infer_error_carries_status():
    error = InferError(InferStatus.FAILED_INPUT_EMPTY, "no input")
    assert error.status is InferStatus.FAILED_INPUT_EMPTY
    assert "no input" in str(error)