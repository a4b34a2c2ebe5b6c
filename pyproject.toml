[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "legguide"
version = "0.1.0"
description = "Kinematics, balance control, state estimation and wire formats for quadruped robots"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "quadruped",
    "robotics",
    "kinematics",
    "quadratic-programming",
    "kalman-filter",
]
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
packages = ["legguide"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
