from setuptools import setup, find_packages

setup(
    name="route-api-graph",
    version="0.1.0",
    description="Route API Graph - static map of SPA routes, components and backend API calls",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "route_api_graph.pipeline": ["default_config.yaml"],
    },
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0.0",
        "pyyaml>=6.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ragraph=route_api_graph.cli:main",
        ],
    },
)
