"""
collapse-sim — building collapse and road blockade simulator.
Earthquake / fire damage model with geometric blockade generation.
"""

from setuptools import setup, find_packages

setup(
    name="collapse-sim",
    version="1.0.0",
    description="Building collapse simulator: probabilistic earthquake and fire "
                "damage with road blockades derived from collapsed walls.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.24",
        "shapely>=2.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
        ],
    },
)
