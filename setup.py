#!/usr/bin/env python3
"""Setup script for ftpbridge."""

from setuptools import find_packages, setup

setup(
    name="ftpbridge",
    version="0.1.0",
    description="HTTP bridge to a partner's FTP inbox",
    packages=find_packages(include=["ftpbridge", "ftpbridge.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "python-multipart>=0.0.9",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "loguru>=0.7",
        "prometheus-client>=0.19",
        "httpx>=0.27",
        "pandas>=2.1",
        "openpyxl>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "ftpbridge=ftpbridge.cli:main",
        ],
    },
)
