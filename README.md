# kuiperinfer

Building blocks for running small convolutional networks with numpy: a
three-dimensional `float32` tensor (channels × rows × cols), a handful of
network layers, a CSV loader and two image helpers for preparing detector
input and mapping boxes back.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Tensors (`kuiperinfer.tensor`)

`Tensor(channels, rows, cols)` creates a zero-filled tensor;
`Tensor.from_shapes([c, h, w])` does the same from a list. Besides its
three-dimensional shape (`shapes()`), a tensor keeps a "raw" shape of one,
two or three dimensions (`raw_shapes()`).

```python
from kuiperinfer.tensor import Tensor, tensor_element_add, tensor_padding

t = Tensor(3, 4, 4)
t.fill(1.0)
t.reshape([4, 4, 3])        # new raw shape, column-major element order kept
padded = tensor_padding(t, [1, 1, 1, 1], 0.0)   # top, bottom, left, right
total = tensor_element_add(t, t)
```

Other members: `rows()`, `cols()`, `channels()`, `size()`, `empty()`,
`data()` / `set_data()`, `index(offset)` (flat column-major offset),
`at(channel, row, col)`, `channel(c)` (a writable view), `padding()`,
`fill()` (a scalar or a flat list of values), `flatten()`, `clone()`,
`rand()` (standard normal samples), `ones()`, `transform(func)`,
`reshape_view()` and `review()` (row-major reshapes), and `show()`, which
writes each channel to the module's logger.

Module functions: `tensor_create`, `tensor_padding`, `tensor_is_same`
(shapes equal and elements within `1e-5`), `tensor_broadcast`, and
`tensor_element_add` / `tensor_element_multiply`. The element-wise
functions broadcast a `(c, 1, 1)` tensor over a `(c, h, w)` one; they fill
the optional `output` tensor, or create one, and return it.

## Loading CSV data (`kuiperinfer.load_data`)

`load_data(path, ",")` reads a delimited text file into a two-dimensional
`float32` array. Reading stops at the first empty line, short rows are
padded with zeros, and cells that do not start with a number are left as
zero. `matrix_size(lines, ",")` returns the `(rows, cols)` such a file
would give.

## Layers

Every layer has `forward(inputs, outputs)`. `inputs` is a list of tensors;
`outputs` is a list whose entries may be `None` and are filled in place;
the list is also returned. Invalid arguments raise
`kuiperinfer.layer.InferError`, whose `status` is an `InferStatus`;
inconsistencies met while computing raise `ValueError`.

* `adaptive_avgpooling.AdaptiveAveragePoolingLayer(output_h, output_w)`
* `batchnorm2d.BatchNorm2dLayer(num_features, eps, affine_weight, affine_bias)`:
  the running means are set with `set_weights`, the running variances with
  `set_bias`
* `cat.CatLayer(dim)`: concatenation along channels (`dim` 1 or -3); with
  `n` outputs, output `i` joins inputs `i`, `i + n`, `i + 2n`, …
* `convolution.ConvolutionLayer(output_channel, in_channel, kernel_h,
  kernel_w, padding_h, padding_w, stride_h, stride_w, groups, use_bias)`

Layers with parameters derive from `layer.ParamLayer`, whose `set_weights`
and `set_bias` accept either a list of tensors or a flat list of values
that is spread over the existing tensors.

```python
from kuiperinfer.batchnorm2d import BatchNorm2dLayer
from kuiperinfer.tensor import Tensor

x = Tensor(3, 8, 8)
x.rand()
bn = BatchNorm2dLayer(3, 1e-5, [1, 1, 1], [0, 0, 0])
bn.set_weights([0.0, 0.0, 0.0])
bn.set_bias([1.0, 1.0, 1.0])
outputs = bn.forward([x], [None])
```

`kuiperinfer.layer_factory` keeps a registry of layer creators:
`register_creator(layer_type, creator)` (each type once),
`create_layer(layer_type, op)` and `registered_types()`. The registry
starts empty.

## Image helpers (`kuiperinfer.image_util`)

`letterbox(image, new_shape=(640, 640), stride=32, color=(114, 114, 114),
fixed_shape=False, scale_up=False)` takes an `(H, W)` or `(H, W, C)` array,
resizes it keeping its aspect ratio and pads it with `color`; `new_shape`
is `(width, height)`. It returns the padded image and the inverse of the
scale applied. `scale_coords(img_shape, rect, img_origin_shape)` returns a
new `Rect` mapped from the letterboxed image back onto the original and
clipped to it. `Detection` holds a `box`, a `conf` and a `class_id`.

## What this package does not do

It does not read model description or weight files and has no graph that
runs a whole network: layers are built and called one at a time, and no
creators are registered with the layer factory out of the box. There is
no command-line program.