"""
Setup configuration for the project.
Allows the package to be installed in development mode.
"""

from setuptools import setup, find_packages

setup(
    name="easy-ioc",
    version="1.0.0",
    description="Lightweight IoC container with component scanning and circular dependency resolution",
    author="easy-ioc contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=[
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "python-dotenv>=1.0.0",
    ],
    entry_points={
        "console_scripts": [
            "easy-ioc=main:main",
        ],
    },
    python_requires=">=3.10",
)
