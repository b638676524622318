[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hblk"
version = "0.2.0"
description = "A small proof-of-work blockchain with secp256k1 key handling and a binary chain file format"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["blockchain", "secp256k1", "ecdsa", "sha256", "proof-of-work"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hblk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
