[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nirvana"
version = "0.1.0"
description = "Fixed-point token arithmetic, bonding-curve pricing and staking reward accounting for the ANA, NIRV and ALMS tokens"
requires-python = ">=3.10"
dependencies = []
keywords = ["fixed-point", "bonding-curve", "staking", "rewards", "token", "pricing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nirvana"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
