[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "derivekit"
version = "0.1.0"
description = "Class decorators for packed bitfields, builders, custom debug output and sortedness checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["bitfield", "builder", "decorator", "repr", "sorted", "code generation"]
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
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["derivekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
