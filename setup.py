#!/usr/bin/env python3
"""
Setup script for the Doomslayer doomscrolling detection system.
"""

import os
import sys
from setuptools import setup, find_packages
from setuptools.command.install import install
from setuptools.command.develop import develop


def read_requirements(filename):
    """Read requirements from file."""
    with open(filename, 'r') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]


def check_system_requirements():
    """Check if system meets requirements."""
    print("Checking system requirements...")

    if sys.version_info < (3, 9):
        print("ERROR: Python 3.9 or higher is required")
        return False

    print(f"✓ Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    return True


def create_directories():
    """Create runtime directories for logs and configuration."""
    for directory in ("logs", "data/configs"):
        os.makedirs(directory, exist_ok=True)
        print(f"✓ Created directory: {directory}")


class CustomInstall(install):
    """Custom install command."""

    def run(self):
        if not check_system_requirements():
            sys.exit(1)
        install.run(self)
        create_directories()


class CustomDevelop(develop):
    """Custom develop command."""

    def run(self):
        if not check_system_requirements():
            sys.exit(1)
        develop.run(self)
        create_directories()


def read_readme():
    """Read README file."""
    try:
        with open("README.md", "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return "Real-time doomscrolling detection from a webcam feed"


setup(
    name="doomslayer",
    version="1.0.0",
    author="Doomslayer Team",
    description="Real-time doomscrolling detection using face landmarks and object detection",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["doomslayer", "doomslayer.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Image Processing",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "dev": [
            "pytest>=7.4.2",
            "black>=23.9.1",
            "flake8>=6.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "doomslayer=main:main",
        ],
    },
    cmdclass={
        "install": CustomInstall,
        "develop": CustomDevelop,
    },
    keywords=[
        "doomscrolling",
        "attention",
        "computer-vision",
        "face-landmarks",
        "gaze-estimation",
        "object-detection",
        "real-time",
        "monitoring",
    ],
)
