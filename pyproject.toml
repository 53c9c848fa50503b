[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "godot-codegen"
version = "0.1.0"
description = "Generates Rust binding sources from the Godot 4 extension API description"
requires-python = ">=3.10"
dependencies = []
keywords = ["godot", "gdextension", "codegen", "bindings", "rust"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["godot_codegen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
