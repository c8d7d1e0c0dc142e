[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wrenchkit"
version = "0.1.0"
description = "Tools for inspecting and converting data from the Ratchet & Clank PS2 games."
requires-python = ">=3.11"
keywords = [
    "ratchet-and-clank",
    "ps2",
    "modding",
    "textures",
    "fip",
    "bmp",
    "racpak",
    "table-of-contents",
    "collision",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Utilities",
]
dependencies = [
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
wrench-fip = "wrenchkit.fipcli:main"
wrench-toc = "wrenchkit.toccli:main"
wrench-texturefinder = "wrenchkit.texturefinder:main"
wrench-matchtoc = "wrenchkit.matchtoc:main"
wrench-pakrac = "wrenchkit.pakrac:main"
wrench-memmap = "wrenchkit.memmap:main"

[tool.hatch.build.targets.wheel]
packages = ["wrenchkit"]

[tool.hatch.build.targets.sdist]
include = [
    "wrenchkit",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
