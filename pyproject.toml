[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "countrydash"
version = "0.1.0"
description = "Country dashboard WSGI service: register dashboards, fill them with country, weather and currency data, and notify webhooks."
requires-python = ">=3.10"
keywords = ["dashboard", "wsgi", "webhooks", "weather", "currency", "countries", "rest"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "werkzeug>=2.3",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
countrydash = "countrydash.server:main"

[tool.hatch.build.targets.wheel]
packages = ["countrydash"]

[tool.hatch.build.targets.sdist]
include = ["countrydash", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
