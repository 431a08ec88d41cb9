[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "m65net"
version = "0.1.0"
description = "Line-prompted TCP terminal, UDP echo server, packet headers, and a simulated memory, console and clock for an 8-bit machine"
requires-python = ">=3.10"
dependencies = []
keywords = ["terminal", "tcp", "udp", "echo", "ipv4", "petscii", "rtc", "bcd", "xorshift"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: System :: Networking",
    "Topic :: Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
m65net-terminal = "m65net.terminal:main"
m65net-udpecho = "m65net.udpecho:main"

[tool.hatch.build.targets.wheel]
packages = ["m65net"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
