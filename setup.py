from setuptools import setup, find_packages

setup(
    name="benchmcp",
    version="0.4.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"benchmcp": ["prompt_templates/*.md"]},
    install_requires=[
        "mcp>=1.20.0,<2",
        "websockets>=10.0",
        "aiohttp>=3.8.0",
        "python-dotenv>=0.19.0",
        "pyyaml>=6.0",
        "jsonschema>=4.0",
        "uvicorn>=0.30.0",
        "starlette>=0.37.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23.0",
            "anyio>=4.0",
            "black>=23.0",
            "flake8>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "benchmcp=benchmcp.server.server:run",
            "benchmcp-build=benchmcp.build.__main__:run",
        ],
    },
    python_requires=">=3.10",
    author="benchmcp developers",
    description="Bench MCP - Model Context Protocol server plugin for a 3D model editor",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
