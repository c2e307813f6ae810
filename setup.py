#!/usr/bin/env python3
"""Setup script for Azure Resource Provider Report"""
from setuptools import setup, find_packages

setup(
    name="azure-provider-report",
    version="1.0.0",
    description="Tenant-wide Azure resource provider usage, classification and landing zone compliance report",
    author="Azure Cost Optimization Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "azure-core>=1.26.0",
        "azure-identity>=1.12.0",
        "azure-mgmt-resource>=21.0.0,<24",
        "azure-mgmt-subscription>=3.1.1",
        "jinja2>=3.1.0",
        "pyyaml>=6.0",
        "rich>=12.0.0",
        "typer>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "azure-provider-report=azure_provider_report.cli.main:main",
        ],
    },
    python_requires=">=3.8",
)
