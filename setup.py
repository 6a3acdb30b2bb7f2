"""Setup configuration for the site audit API."""

from pathlib import Path

from setuptools import setup

# Read long description from README
readme_file = Path(__file__).parent / "README.md"
long_description = (
    readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""
)

setup(
    name="siteaudit-api",
    version="1.0.0",
    description="HTTP API for site records and audit trigger dispatch",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["siteaudit", "siteaudit.src"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "structlog>=24.1.0",
        "uvicorn>=0.27.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.27.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "siteaudit-api=siteaudit.src.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
