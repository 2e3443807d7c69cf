[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "anyfind"
version = "0.1.0"
description = "Whole-disk file name search with a background indexer, a file-system watcher and a terminal prompt"
requires-python = ">=3.10"
keywords = ["search", "files", "index", "file-finder", "watcher"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: File Managers",
    "Topic :: Utilities",
]
dependencies = [
    "platformdirs",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
anyfind = "anyfind.app:main"

[tool.hatch.build.targets.wheel]
packages = ["anyfind"]

[tool.pytest.ini_options]
addopts = "-ra"
