[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "calcnet"
version = "0.1.0"
description = "A non-blocking TCP arithmetic-expression server and a load-testing client"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "server", "client", "calculator", "selectors", "non-blocking"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
calc-server = "calcnet.server:main"
calc-client = "calcnet.client:main"

[tool.hatch.build.targets.wheel]
packages = ["calcnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
