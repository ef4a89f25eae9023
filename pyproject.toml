[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "louisnet"
version = "0.1.0"
description = "A small single-threaded reactor-style TCP networking library with an echo server"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "tcp", "reactor", "event-loop", "server", "echo", "buffer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
louisnet-echo = "louisnet.echo:main"

[tool.hatch.build.targets.wheel]
packages = ["louisnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
