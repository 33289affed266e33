[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "anode"
version = "0.1.0"
description = "Concurrency primitives (monitors, completables, a thread pool, backoff) and lock and executor benchmarks"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "concurrency",
    "threading",
    "monitor",
    "thread-pool",
    "executor",
    "backoff",
    "benchmark",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
anode-quad-bench = "anode.quad_bench:main"
anode-exec-bench = "anode.exec_bench:main"

[tool.hatch.build.targets.wheel]
packages = ["anode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
