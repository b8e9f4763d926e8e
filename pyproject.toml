[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voxelsketch"
version = "0.1.0"
description = "Peer-to-peer voxel sketching game logic: wire messages, player slots, voxel canvas and integrity checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["voxel", "game", "peer-to-peer", "networking", "serialization"]
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
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["voxelsketch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
