[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pegmeta"
version = "0.1.0"
description = "Abstract syntax trees and optimization passes for PEG grammar rules"
requires-python = ">=3.10"
dependencies = []
keywords = ["peg", "parser", "grammar", "ast", "optimizer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pegmeta"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
