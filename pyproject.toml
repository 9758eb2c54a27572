[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysgauge"
version = "0.1.0"
description = "Read system load, memory, host, network and per-process statistics"
requires-python = ">=3.10"
dependencies = []
keywords = ["monitoring", "metrics", "system", "load", "memory", "network", "procfs", "utmp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: BSD :: FreeBSD",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sysgauge"]

[tool.pytest.ini_options]
addopts = "-ra"
