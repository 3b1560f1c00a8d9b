[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "simple_message"
version = "0.1.0"
description = "Simple message protocol for industrial robot controllers: message framing, typed payloads and TCP/UDP connections"
requires-python = ">=3.10"
dependencies = []
keywords = ["robotics", "industrial", "protocol", "tcp", "udp", "simple message"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["simple_message"]

[tool.pytest.ini_options]
addopts = "-ra"
