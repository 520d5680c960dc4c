[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gouml"
version = "0.1.0"
description = "Scan a Go source tree and produce a PlantUML class diagram of its structs, interfaces and their relations"
requires-python = ">=3.10"
dependencies = []
keywords = ["go", "golang", "plantuml", "uml", "class-diagram", "code-analysis", "documentation"]
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
    "Topic :: Software Development :: Documentation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gouml = "gouml.cli:main"
gouml-demo = "gouml.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["gouml"]

[tool.pytest.ini_options]
addopts = "-ra"
