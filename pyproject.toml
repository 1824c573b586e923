[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scanpath"
version = "0.1.0"
description = "Geometry, file formats and scan-path refinement for laser line-scanner inspection"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "laser scanner",
    "trajectory",
    "inspection",
    "point cloud",
    "stl",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["scanpath"]

[tool.hatch.build.targets.sdist]
include = [
    "scanpath",
    "tests",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
