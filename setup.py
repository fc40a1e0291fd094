"""
Setup script for job-portal project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="job-portal",
    version="1.2.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["version"],
    include_package_data=True,
    package_data={
        "portal": [
            "templates/*.html",
            "templates/admin/*.html",
            "templates/application/*.html",
            "templates/partials/*.html",
        ],
    },
    python_requires=">=3.11",
    install_requires=[
        "flask>=3.0",
        "pymongo>=4.6",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-mock>=3.12",
        ],
    },
    entry_points={
        "console_scripts": [
            "job-portal-seed=portal.seed:main",
        ],
    },
)
