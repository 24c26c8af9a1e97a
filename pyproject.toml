[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "peinspect"
version = "0.1.0"
description = "Inspect the headers of Windows PE executables and libraries"
requires-python = ">=3.10"
dependencies = []
keywords = ["pe", "portable-executable", "coff", "windows", "binary", "analysis"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
peinspect = "peinspect.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["peinspect"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
