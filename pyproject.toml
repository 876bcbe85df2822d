[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nestlab"
version = "0.1.0"
description = "Small vector maths, tagged binary serialization, MIDI controller state and frame capture helpers for interactive tools"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["vector", "math", "serialization", "midi", "screenshot", "input"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["nestlab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
