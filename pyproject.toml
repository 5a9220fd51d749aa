[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sascan"
version = "0.1.1"
description = "Building blocks for block-wise suffix array construction: rank structures, gap arrays, gap-buffer streaming and merging of partial suffix arrays and BWTs."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "suffix array",
    "burrows-wheeler transform",
    "bwt",
    "rank",
    "gap array",
    "text indexing",
    "string algorithms",
]
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
    "Topic :: Text Processing :: Indexing",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["sascan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
