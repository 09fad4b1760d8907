"""
Linen engagement engine build configuration

Usage:
    pip install -e .            # Runtime only
    pip install -e ".[test]"    # With the test toolchain
"""

from setuptools import setup, find_packages

setup(
    name="linen-engagement",
    version="0.1.0",
    description="Temporal engagement and achievement engine for a wellness companion",
    packages=find_packages(include=["engagement", "engagement.*"]),
    install_requires=[
        "aiosqlite>=0.19",
        "anthropic>=0.34",
        "fastapi>=0.110",
        "loguru>=0.7",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "httpx>=0.27",
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    python_requires=">=3.11",
)
