[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "refcnt"
version = "0.1.0"
description = "Explicit intrusive reference counting with owning, borrowed and unowned pointer handles"
requires-python = ">=3.10"
dependencies = []
keywords = ["reference counting", "intrusive pointer", "ownership", "borrow", "lifetime"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["refcnt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
