#!/usr/bin/env python
"""Setup configuration for the fhirmodel object model."""

from setuptools import find_packages, setup

setup(
    name="fhirmodel",
    version="0.1.0",
    description="Immutable FHIR object model with builders, validation and visitors",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5.0",
        "pydantic-settings>=2.0.0",
        "structlog>=23.2.0",
        "defusedxml>=0.7.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
)
