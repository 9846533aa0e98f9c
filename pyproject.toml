[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hypercontacts"
version = "0.1.0"
description = "A contacts service serving Hyperview XML screens and a JSON API from one WSGI app"
requires-python = ">=3.10"
keywords = ["contacts", "hypermedia", "hyperview", "wsgi", "json-api", "werkzeug"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "werkzeug",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hypercontacts = "hypercontacts.server:main"
hypercontacts-logfmt = "hypercontacts.logfmt:main"

[tool.hatch.build.targets.wheel]
packages = ["hypercontacts"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
