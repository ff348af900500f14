[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "weatherstation"
version = "0.1.0"
description = "Weather station with BMP280/AHT20 sensors, SSD1306 display, LED matrix alerts and a web dashboard"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "weather station",
    "bmp280",
    "aht20",
    "ssd1306",
    "i2c",
    "sensors",
    "dashboard",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
weatherstation = "weatherstation.app:main"

[tool.hatch.build.targets.wheel]
packages = ["weatherstation"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
