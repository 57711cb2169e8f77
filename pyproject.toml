[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fwlaptop"
version = "0.1.0"
description = "Parse Framework Laptop firmware capsules, PD controller binaries and input deck state"
requires-python = ">=3.10"
dependencies = []
keywords = ["framework", "laptop", "firmware", "uefi", "capsule", "pd", "ccgx", "input-deck"]
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
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fwlaptop"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
