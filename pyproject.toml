[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lastview"
version = "0.1.0"
description = "List past and current logins from wtmp and btmp login records"
requires-python = ">=3.10"
dependencies = []
keywords = ["last", "lastb", "wtmp", "btmp", "utmp", "login", "accounting"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lastview = "lastview.cli:main"
slast = "lastview.simple:main"

[tool.hatch.build.targets.wheel]
packages = ["lastview"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
