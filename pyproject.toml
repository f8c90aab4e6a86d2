[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cnfkit"
version = "0.1.0"
description = "Tools for CNF formulas: DIMACS parsing, unit propagation, subsumption, variable renaming, Horn renaming search, model refinement and resource-limited process runs"
requires-python = ">=3.10"
dependencies = []
keywords = ["cnf", "dimacs", "sat", "horn", "preprocessing", "subsumption"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cnfkit-smp = "cnfkit.smp:main"
cnfkit-wrap = "cnfkit.wrapper:main"

[tool.hatch.build.targets.wheel]
packages = ["cnfkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
