[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rsdkaudio"
version = "1.3.2"
description = "Animation, graphics-surface and sound-mixing core for a retro 2D game engine"
requires-python = ">=3.10"
dependencies = []
keywords = ["game engine", "animation", "audio", "mixer", "sprites", "retro"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Sound/Audio :: Mixers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rsdkaudio"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
