[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kuiperinfer"
version = "0.1.0"
description = "Float tensors, convolutional network layers and detector image helpers built on numpy"
requires-python = ">=3.10"
keywords = ["inference", "neural-network", "tensor", "convolution", "batchnorm", "letterbox"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kuiperinfer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
