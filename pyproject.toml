[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "protospec"
version = "0.1.0"
description = "Protocol Buffers field attribute specifications, timestamp types and RFC 3339 parsing"
requires-python = ">=3.10"
dependencies = []
keywords = ["protobuf", "protocol-buffers", "timestamp", "duration", "rfc3339", "schema"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["protospec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
