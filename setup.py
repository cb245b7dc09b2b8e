"""Setup configuration for httpu-discovery tool."""

from setuptools import setup, find_packages

setup(
    name="httpu-discovery",
    version="0.1.0",
    description="HTTP over UDP discovery client (HTTPU/HTTPMU, SSDP)",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "psutil>=5.9.3",
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "httpu-discovery=httpu_discovery.cli:main",
        ],
    },
)
