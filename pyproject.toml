[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pkipath"
version = "0.1.0"
description = "X.509 certification path building with issuer-independent certificate checks."
requires-python = ">=3.10"
dependencies = []
keywords = ["x509", "pki", "certificate", "path-building", "der", "eku"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pkipath"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
