"""
Setup script for the html-pdf-api project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="html-pdf-api",
    version="1.0.0",
    description="REST API and CLI for HTML to PDF conversion with Playwright/Chromium",
    packages=find_packages(include=["html_pdf_api", "html_pdf_api.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "python-multipart>=0.0.9",
        "playwright>=1.40",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
        "client": [
            "requests>=2.31",
        ],
    },
    entry_points={
        "console_scripts": [
            "html-pdf-api=html_pdf_api.cli:main",
        ],
    },
)
