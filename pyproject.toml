[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "luminor"
version = "0.1.0"
description = "Building blocks for a property-management web platform: i18n, sessions, event bus, rentals and retrieval-augmented search."
requires-python = ">=3.11"
dependencies = [
    "werkzeug",
    "httpx",
]
keywords = [
    "wsgi",
    "i18n",
    "event-sourcing",
    "event-bus",
    "rag",
    "embeddings",
    "ollama",
    "property-management",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["luminor"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
