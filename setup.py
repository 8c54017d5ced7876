"""
nstackgen setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="nstackgen",
    version="1.0.0",
    description="nstackgen — NStack localization source generator",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "nstackgen=nstackgen.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
        "httpx>=0.27",
    ],
    extras_require={
        "tests": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
)
