#!/usr/bin/env python3
"""
Setup configuration for tar-gist.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

# Read requirements from requirements.txt
requirements = []
if (this_directory / "requirements.txt").exists():
    requirements = (this_directory / "requirements.txt").read_text().strip().split('\n')
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

setup(
    name="tar-gist",
    version="1.0.0",
    author="Project Think",
    author_email="",
    description="Store files in a GitHub Gist as a compressed, armored tar archive",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/your-username/tar-gist",
    packages=find_packages(include=['pipeline*']),
    py_modules=[
        'tar_gist',
        'gist_cli',
        'gist_configs',
        'gist_errors',
        'gist_store',
        'base_classes',
        'run_tests'
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: System :: Archiving",
        "Topic :: System :: Archiving :: Compression",
        "Topic :: Utilities",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: POSIX",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
        "test": [
            "pytest>=6.0",
            "pytest-cov",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "tar-gist=gist_cli:main",
            "run-tar-gist-tests=run_tests:main",
        ],
    },
    include_package_data=True,
    keywords=[
        "tar",
        "gist",
        "github",
        "archive",
        "pem",
        "compression",
    ],
    project_urls={
        "Bug Reports": "https://github.com/your-username/tar-gist/issues",
        "Source": "https://github.com/your-username/tar-gist",
    },
)
