[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "logbroker"
version = "0.1.0"
description = "A small partitioned, segment-based message log broker with a length-prefixed binary TCP protocol"
requires-python = ">=3.11"
dependencies = []
keywords = ["message broker", "commit log", "log segment", "partition", "queue", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
logbroker = "logbroker.network:main"

[tool.hatch.build.targets.wheel]
packages = ["logbroker"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
