[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cellview"
version = "0.1.0"
description = "Widgets, colour tags and an event loop for character-cell terminal user interfaces"
requires-python = ">=3.10"
dependencies = []
keywords = ["terminal", "tui", "widgets", "ansi", "console"]
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
    "Topic :: Software Development :: User Interfaces",
    "Topic :: Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cellview"]

[tool.pytest.ini_options]
addopts = "-ra"
