[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "makeflow"
version = "0.1.0"
description = "Task runner building blocks: workspace discovery, environment setup, argument functions, profiles and tool installation."
requires-python = ">=3.11"
dependencies = []
keywords = ["build", "task-runner", "workspace", "environment", "cargo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["makeflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
