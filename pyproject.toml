[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mqttcore"
version = "0.1.0"
description = "Core building blocks for an MQTT broker: wire codecs, fixed headers, in-flight tracking, a client registry and run-time record types"
requires-python = ">=3.10"
dependencies = []
keywords = ["mqtt", "broker", "codec", "iot", "messaging"]
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
    "Topic :: Communications",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mqttcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
