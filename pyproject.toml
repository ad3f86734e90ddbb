[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vmengine"
version = "0.1.0"
description = "A small command-stack engine core with typed runtime flags, a single-instance guard and a job queue"
requires-python = ">=3.10"
dependencies = []
keywords = ["engine", "flags", "command-stack", "job-queue", "game-engine"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vmengine"]

[tool.pytest.ini_options]
addopts = "-ra"
