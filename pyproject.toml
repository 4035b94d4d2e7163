[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "adsreport"
version = "0.1.0"
description = "Reporting, annotation and audit helpers for advertising campaign analytics"
requires-python = ">=3.10"
dependencies = []
keywords = ["advertising", "analytics", "campaigns", "audit", "reporting"]
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
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["adsreport"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
