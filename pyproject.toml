[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dbtoolkit"
version = "0.1.0"
description = "Schema lattice comparison, table filter rules and test-data generators for MySQL-compatible databases"
requires-python = ">=3.10"
dependencies = []
keywords = ["mysql", "schema", "table-filter", "lattice", "data-generation"]
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
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dbtoolkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
