"""
ContentStore setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="contentstore",
    version="1.0.0",
    description="ContentStore — Document content persistence on S3",
    packages=find_packages(include=["contentstore", "contentstore.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "contentstore=contentstore.cli:main",
        ],
    },
    install_requires=[
        "boto3>=1.34",
        "botocore>=1.34",
        "pydantic>=2.5",
        "cryptography>=42.0",
        "pyyaml>=6.0",
        "Pillow>=10.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
)
