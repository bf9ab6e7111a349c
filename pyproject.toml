[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tnacalc"
version = "0.1.0"
description = "Core of a small calculator language: tokens, expression nodes, runtime values, an IR control flow graph and an IR evaluator"
requires-python = ">=3.10"
dependencies = []
keywords = ["calculator", "interpreter", "ast", "ir", "control-flow-graph", "evaluator"]
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
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tnacalc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
