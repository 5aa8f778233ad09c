[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bcplkit"
version = "0.1.0"
description = "Building blocks for a BCPL compiler: token types, syntax tree, label management, runtime library and AST optimisation passes"
requires-python = ">=3.10"
dependencies = []
keywords = ["bcpl", "compiler", "optimizer", "ast", "constant-folding", "loop-invariant-code-motion", "inlining"]
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
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bcplkit"]

[tool.pytest.ini_options]
addopts = "-ra"
