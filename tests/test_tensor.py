import logging

import numpy as np
import pytest

from kuiperinfer.tensor import (
    Tensor,
    tensor_broadcast,
    tensor_create,
    tensor_element_add,
    tensor_element_multiply,
    tensor_is_same,
    tensor_padding,
)


@pytest.mark.parametrize(
    "target",
    [[224, 224, 3], [672, 224], [150528]],
)
def test_reshape_keeps_element_order(target):
    tensor1 = Tensor(3, 224, 224)
    tensor1.rand()
    tensor2 = tensor1.clone()
    tensor1.reshape(target)

    assert tensor1.raw_shapes() == target
    assert tensor1.size() == tensor2.size()
    size = tensor1.size()
    assert [tensor1.index(i) for i in range(size)] == [
        tensor2.index(i) for i in range(size)
    ]


def test_reshape_three_dims_sets_shapes():
    tensor = Tensor(3, 224, 224)
    tensor.reshape([224, 224, 3])
    assert tensor.shapes() == [224, 224, 3]


@pytest.mark.parametrize(
    "dims, raw",
    [((1, 1, 5), [5]), ((1, 3, 4), [3, 4]), ((2, 3, 4), [2, 3, 4])],
)
def test_constructor_raw_shapes(dims, raw):
    tensor = Tensor(*dims)
    assert tensor.raw_shapes() == raw
    assert tensor.shapes() == list(dims)


def test_from_shapes_requires_three():
    assert Tensor.from_shapes([2, 3, 4]).shapes() == [2, 3, 4]
    with pytest.raises(ValueError):
        Tensor.from_shapes([2, 3])


def test_fill_values_row_major_and_index_column_major():
    tensor = Tensor(2, 2, 3)
    tensor.fill(range(12))
    assert tensor.at(1, 0, 2) == 8.0
    assert tensor.at(0, 1, 0) == 3.0
    assert tensor.index(1) == 3.0
    assert tensor.index(6) == 6.0


def test_fill_wrong_count_raises():
    tensor = Tensor(1, 2, 2)
    with pytest.raises(ValueError):
        tensor.fill([1.0, 2.0])


def test_out_of_range_access():
    tensor = Tensor(1, 2, 2)
    with pytest.raises(IndexError):
        tensor.index(4)
    with pytest.raises(IndexError):
        tensor.at(0, 2, 0)
    with pytest.raises(IndexError):
        tensor.channel(1)


def test_empty_tensor():
    tensor = Tensor(0, 3, 3)
    assert tensor.empty()
    with pytest.raises(ValueError):
        tensor.rows()


def test_channel_is_writable_view():
    tensor = Tensor(2, 2, 2)
    tensor.channel(1)[0, 1] = 7.0
    assert tensor.at(1, 0, 1) == 7.0


def test_set_data_checks_shape():
    tensor = Tensor(1, 2, 2)
    tensor.set_data(np.full((1, 2, 2), 3.0))
    assert tensor.at(0, 1, 1) == 3.0
    with pytest.raises(ValueError):
        tensor.set_data(np.zeros((2, 2, 2)))


def test_padding_in_place():
    tensor = Tensor(1, 2, 2)
    tensor.ones()
    tensor.padding([1, 0, 2, 1], -1.0)
    assert tensor.shapes() == [1, 3, 5]
    assert tensor.at(0, 0, 0) == -1.0
    assert tensor.at(0, 1, 2) == 1.0
    assert float(tensor.data().sum()) == 4 - 11


def test_tensor_padding_returns_copy():
    tensor = Tensor(2, 2, 2)
    tensor.fill(range(8))
    padded = tensor_padding(tensor, [1, 1, 1, 1], 0.0)
    assert padded.shapes() == [2, 4, 4]
    assert tensor.shapes() == [2, 2, 2]
    in_place = tensor.clone()
    in_place.padding([1, 1, 1, 1], 0.0)
    assert np.array_equal(padded.data(), in_place.data())
    assert padded.at(1, 1, 1) == 4.0


def test_flatten():
    tensor = Tensor(2, 3, 4)
    tensor.rand()
    before = [tensor.index(i) for i in range(24)]
    tensor.flatten()
    assert tensor.raw_shapes() == [24]
    assert tensor.shapes() == [1, 24, 1]
    assert [tensor.index(i) for i in range(24)] == before


def test_review_is_row_major():
    tensor = Tensor(2, 2, 3)
    tensor.fill(range(12))
    tensor.review([1, 3, 4])
    assert tensor.shapes() == [1, 3, 4]
    assert tensor.at(0, 1, 0) == 4.0
    assert tensor.at(0, 2, 3) == 11.0


def test_reshape_view():
    tensor = Tensor(1, 2, 6)
    tensor.fill(range(12))
    tensor.reshape_view([3, 4])
    assert tensor.raw_shapes() == [3, 4]
    assert tensor.shapes() == [1, 3, 4]
    assert tensor.at(0, 2, 1) == 9.0
    tensor.reshape_view([12])
    assert tensor.shapes() == [1, 12, 1]


def test_reshape_errors():
    tensor = Tensor(2, 3, 4)
    with pytest.raises(ValueError):
        tensor.reshape([5, 5])
    with pytest.raises(ValueError):
        tensor.reshape([1, 2, 3, 4])
    with pytest.raises(ValueError):
        tensor.reshape([])


def test_clone_is_independent():
    tensor = Tensor(1, 2, 2)
    copy = tensor.clone()
    copy.fill(5.0)
    assert tensor.at(0, 0, 0) == 0.0
    assert copy.at(0, 0, 0) == 5.0


def test_transform():
    tensor = Tensor(2, 2, 2)
    tensor.fill(range(8))
    tensor.transform(lambda v: v * 2)
    assert tensor.at(1, 1, 1) == 14.0


def test_rand_draws_values():
    tensor = Tensor(3, 64, 64)
    tensor.rand()
    assert float(np.std(tensor.data())) > 0.5


def test_show_logs_channels(caplog):
    tensor = Tensor(2, 1, 1)
    with caplog.at_level(logging.INFO, logger="kuiperinfer.tensor"):
        tensor.show()
    assert "Channel: 1" in caplog.text


def test_tensor_is_same():
    a = Tensor(2, 3, 3)
    a.rand()
    b = a.clone()
    assert tensor_is_same(a, b)
    b.channel(0)[0, 0] += 1e-6
    assert tensor_is_same(a, b)
    b.channel(0)[0, 0] += 1e-3
    assert not tensor_is_same(a, b)
    assert not tensor_is_same(a, Tensor(2, 3, 4))


def test_element_add_same_shapes():
    a = tensor_create(2, 3, 3)
    a.fill(1.0)
    b = tensor_create(2, 3, 3)
    b.fill(2.0)
    result = tensor_element_add(a, b)
    assert np.all(result.data() == 3.0)
    out = tensor_create(2, 3, 3)
    assert tensor_element_add(a, b, out) is out
    assert np.all(out.data() == 3.0)
    with pytest.raises(ValueError):
        tensor_element_add(a, b, tensor_create(2, 3, 4))


def test_element_add_broadcast():
    a = tensor_create(2, 3, 3)
    a.ones()
    b = tensor_create(2, 1, 1)
    b.fill([10.0, 20.0])
    result = tensor_element_add(a, b)
    assert result.shapes() == [2, 3, 3]
    assert np.all(result.channel(0) == 11.0)
    assert np.all(result.channel(1) == 21.0)


def test_element_multiply_broadcast_left():
    a = tensor_create(2, 1, 1)
    a.fill([2.0, 3.0])
    b = tensor_create(2, 2, 2)
    b.fill(4.0)
    result = tensor_element_multiply(a, b)
    assert result.shapes() == [2, 2, 2]
    assert result.channel(0).tolist() == [[8.0, 8.0], [8.0, 8.0]]
    assert result.channel(1).tolist() == [[12.0, 12.0], [12.0, 12.0]]


def test_broadcast_errors():
    with pytest.raises(ValueError):
        tensor_broadcast(tensor_create(2, 3, 3), tensor_create(2, 2, 2))
    with pytest.raises(ValueError):
        tensor_element_add(tensor_create(2, 3, 3), tensor_create(3, 1, 1))


def test_broadcast_same_shape_returns_inputs():
    a = tensor_create(1, 2, 2)
    b = tensor_create(1, 2, 2)
    left, right = tensor_broadcast(a, b)
    assert left is a and right is b