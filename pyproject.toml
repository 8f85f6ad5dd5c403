[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ictransport"
version = "0.1.0"
description = "Transport types, request IDs and representation-independent hashing for Internet Computer messages"
requires-python = ">=3.10"
dependencies = []
keywords = ["internet-computer", "request-id", "hashing", "leb128", "principal", "transport"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ictransport"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
