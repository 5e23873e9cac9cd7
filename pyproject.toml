[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bjthelper"
version = "0.1.0"
description = "Game-logic helpers for a city-building simulation: configuration tables, hero work outcomes, building records and a friend/gift message system."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "simulation", "city-building", "heroes", "friends", "gifts"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bjthelper"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
