"""
Setup script for the Pixie recommender package.
"""

from setuptools import setup, find_packages

setup(
    name="pixie_recommender",
    version="1.0.0",
    description="Pixie-style random-walk recommendations on bipartite graphs",
    author="Pixie Recommender Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"config": ["*.yaml"]},
    python_requires=">=3.8",
    install_requires=[
        "networkx>=3.0",
        "numpy>=1.23.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pixie-recommend=scripts.recommend:main",
            "pixie-generate=scripts.generate_data:main",
            "pixie-benchmark=scripts.benchmark_latency:main",
        ],
    },
)
