[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "architect-chain"
version = "0.1.0"
description = "Core of a small proof-of-work blockchain: blocks, Merkle trees, proof of work, difficulty adjustment and fixed or dynamic transaction fees."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "blockchain",
    "proof-of-work",
    "merkle-tree",
    "transaction-fees",
    "difficulty-adjustment",
    "satoshi",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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
packages = ["architect_chain"]

[tool.hatch.build.targets.sdist]
include = ["architect_chain", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
