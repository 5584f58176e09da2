[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spheretrace"
version = "1.0.0"
description = "A small multi-threaded path tracer that renders spheres described in JSON scenes to PNG."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["ray tracing", "path tracing", "rendering", "png", "spheres"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
spheretrace = "spheretrace.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["spheretrace"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
