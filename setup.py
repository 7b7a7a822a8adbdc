from setuptools import setup, find_packages

setup(
    name="catalog-service",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "pydantic>=2.0",
        "pydantic-settings",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg",
        "redis>=5.0",
        "loguru",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
            "aiosqlite",
        ],
    },
    python_requires=">=3.11",
)
