"""
Setup script for doc-gen-service project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="doc-gen-service",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"doc_gen_service": ["templates/*.html"]},
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "jinja2>=3.1",
        "playwright>=1.40",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
)
