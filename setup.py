# setup.py
from setuptools import setup, find_packages

setup(
    name="a11y_scout",
    version="0.1.0",
    description="A11yScout: crawl policy engine and page discovery for accessibility audits",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "lxml>=5.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["a11y-scout=a11y_scout.cli:main"],
    },
    python_requires=">=3.11",
)
