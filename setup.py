# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for Pipeline Studio editor core
"""

from setuptools import setup, find_packages

setup(
    name="pipeline-studio",
    version="1.0.0",
    description="Graph model, schema-driven forms and session orchestration for the pipeline editor",
    author="Jason Cafarelli",
    package_dir={"": "backend"},
    packages=find_packages(where="backend", exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "httpx>=0.24.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "fastapi>=0.100.0",
        ]
    },
)
