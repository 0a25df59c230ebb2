"""Float tensors, convolutional network layers, CSV loading and detector image helpers."""

__version__ = "0.1.0"
__all__ = [
    "adaptive_avgpooling",
    "batchnorm2d",
    "cat",
    "convolution",
    "image_util",
    "layer",
    "layer_factory",
    "load_data",
    "tensor",
]