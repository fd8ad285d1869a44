from setuptools import find_namespace_packages, setup

setup(
    name="sharkmon",
    version="0.3.1",
    description="Retrieve and serve Electro Industries Shark 100S power data over Modbus/TCP",
    packages=find_namespace_packages(where="src", include=["sharkmon*"]),
    package_dir={"": "src"},
    install_requires=[
        "pymodbus>=3.10,<4",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "fastapi>=0.100",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "sharkmon=sharkmon.entrypoints.daemon:run",
        ],
    },
    python_requires=">=3.10",
)
