#!/usr/bin/env python
from setuptools import setup, find_packages

setup(
    name="smart-file-backup",
    version="0.1.0",
    description="Per-file version history with content-hash change detection",
    author="Smart Backup Team",
    author_email="smart-backup@example.com",
    url="https://github.com/example/smart-file-backup",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        # Configuration
        "pydantic>=2.7.0",
        "pydantic-settings>=2.3.0",

        # Utilities
        "structlog>=24.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.1.0",
            "pytest-cov>=4.2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "smart-backup=smart_backup.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
    ],
)
