[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "signalmonitor"
version = "0.1.0"
description = "Signal strength monitoring for OCT frame streams: bit-depth conversion, ROI image metrics and a scrolling metric history."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["oct", "optical coherence tomography", "signal monitor", "image metrics", "roi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Healthcare Industry",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["signalmonitor"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
