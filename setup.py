"""
Setup script for curriculum-engine.

Curriculum engine is the adaptive spaced-repetition core of a
language-learning product. It serves three roles:

1. Session Builder - Picks the day's practice format and compiles items
2. Scheduler - SM-2 retention updates from graded answers
3. Mastery Pipeline - Moves items between active, learned and review queues

The 'curriculum' command is the CLI entry point; the HTTP API is served by
'curriculum serve'.
"""

from setuptools import find_packages, setup

setup(
    name="curriculum-engine",
    version="0.1.0",
    description="Adaptive spaced-repetition practice engine for language learning",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Curriculum Engine Contributors",
    packages=find_packages(include=["curriculum_engine", "curriculum_engine.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "curriculum=curriculum_engine.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 language education",
)
