"""Setup configuration for Tether."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="tether-cli",
    version="0.1.0",
    description="Answer questions with Gemini function calling over a local tool server",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "rich>=13.0",
        "pyyaml>=6.0",
        "httpx>=0.24.0",
        "pygments>=2.14.0",
        "mcp>=1.6,<2",
    ],
    extras_require={
        "test": ["pytest>=7.0", "pydantic>=2.0"],
    },
    entry_points={
        "console_scripts": [
            "tether=tether.cli:cli",
        ],
    },
)
