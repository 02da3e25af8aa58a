[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mayday"
version = "0.1.0"
description = "Simulation core for a single-player last-stand shooter: scenario director, troop AI, shooting, movement and wire protocol."
requires-python = ">=3.11"
dependencies = []
keywords = ["game", "simulation", "ai", "fsm", "shooter", "protocol"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Typing :: Typed",
    "Topic :: Games/Entertainment :: First Person Shooters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mayday"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
