"""
Setup script for mistake-tracker.

Mistake Tracker is a personal learning log with spaced-repetition
retests. It serves two roles:

1. REST API - Backend for the web dashboard (mistakes, retests, stats, quiz)
2. CLI - Log and retest mistakes from the terminal

The 'mistakes' command is the CLI entry point; the API is served with
'mistakes serve' or 'uvicorn main:app'.
"""

from setuptools import find_packages, setup

setup(
    name="mistake-tracker",
    version="1.0.0",
    description="Log mistakes, retest them on a spaced schedule and track mastery",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["mistake_tracker", "mistake_tracker.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # API
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "httpx>=0.25.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "postgres": [
            "psycopg2-binary>=2.9.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mistakes=mistake_tracker.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Framework :: FastAPI",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="learning spaced-repetition mistakes retest mastery",
)
