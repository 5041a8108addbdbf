[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rigidspace"
version = "0.1.0"
description = "Lie group configuration spaces, kinematic tree models and helpers for rigid-body robots"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["lie group", "robotics", "kinematics", "configuration space", "SE3", "SO3", "SRDF"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rigidspace"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
