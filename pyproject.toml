[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wasmsched"
version = "0.1.0"
description = "Scheduling-framework plugin model, NodeNumber scoring plugins, guest extension-point dispatch, an HTTP extender and scheduler performance helpers"
requires-python = ">=3.10"
keywords = [
    "scheduler",
    "scheduling framework",
    "plugins",
    "scoring",
    "extender",
    "benchmark",
    "cluster",
]
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
    "Topic :: System :: Clustering",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["wasmsched"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
