[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "echoserve"
version = "0.1.0"
description = "Small TCP echo servers: a line-buffered one and a threaded byte-for-byte one."
requires-python = ">=3.10"
dependencies = []
keywords = ["echo", "tcp", "server", "socket", "network"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
echoserve-lines = "echoserve.line_server:main"
echoserve-threaded = "echoserve.threaded_server:main"

[tool.hatch.build.targets.wheel]
packages = ["echoserve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
