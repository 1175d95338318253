[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "skirmishd"
version = "0.1.0"
description = "Lockstep game server for a small real-time strategy skirmish, with its unit simulation and wire formats"
requires-python = ">=3.10"
dependencies = []
keywords = ["rts", "game-server", "lockstep", "simulation", "networking"]
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
    "Topic :: Games/Entertainment :: Real Time Strategy",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
skirmishd = "skirmishd.main:main"

[tool.hatch.build.targets.wheel]
packages = ["skirmishd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
