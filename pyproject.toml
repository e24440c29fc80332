[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gaprope"
version = "0.1.0"
description = "A UTF-8 text rope backed by gap-buffer leaves, for frequent edits to large text buffers"
requires-python = ">=3.10"
dependencies = []
keywords = ["rope", "text", "gap buffer", "editor", "utf-8", "data structure"]
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
    "Topic :: Text Processing :: General",
    "Topic :: Text Editors",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["gaprope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
