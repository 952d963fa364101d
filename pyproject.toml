[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kbcurator"
version = "0.1.0"
description = "Render knowledge-base content into wiki pages through an intermediate representation, frontends and transformation passes."
requires-python = ">=3.10"
dependencies = []
keywords = ["wiki", "knowledge-base", "documentation", "mermaid", "rendering"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Documentation",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kbcurator"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
