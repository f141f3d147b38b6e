[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "pf2ecombat"
version = "0.1.0"
description = "Turn-based tabletop combat rules: degrees of success, attribute sets, damage resolution, abilities and combatants"
requires-python = ">=3.10"
dependencies = []
keywords = ["pathfinder", "tabletop", "rpg", "turn-based", "combat", "dice"]
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
    "Topic :: Games/Entertainment :: Turn Based Strategy",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["pf2ecombat*"]

[tool.pytest.ini_options]
addopts = "-ra"
