[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spongetcp"
version = "0.1.0"
description = "User-space TCP building blocks: byte streams, stream reassembly, sequence-number wrapping, segment parsing and a TCP receiver."
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "networking", "reassembly", "byte-stream", "sockets", "checksum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["spongetcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
