[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leptoscargo"
version = "0.1.0"
description = "Resolve Leptos project configuration from cargo metadata and run cargo tests and project templates"
requires-python = ">=3.10"
keywords = ["leptos", "cargo", "build", "wasm", "tailwind"]
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
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
leptoscargo = "leptoscargo.commands:main"

[tool.hatch.build.targets.wheel]
packages = ["leptoscargo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
