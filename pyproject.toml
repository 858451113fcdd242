[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "gorder"
version = "0.1.0"
description = "Order, stock and payment handlers with RabbitMQ messaging and Consul discovery"
requires-python = ">=3.10"
keywords = ["orders", "stock", "payments", "cqrs", "rabbitmq", "consul"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business",
]
dependencies = [
    "pika",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.setuptools.packages.find]
include = ["gorder*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
