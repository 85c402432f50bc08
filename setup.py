# setup.py

from setuptools import setup, find_packages

setup(
    name="district-stats",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'district-stats=district_stats.cli:main',
        ],
    },
    description="Gear capacity statistics for nodes, districts and profiles",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    keywords="capacity districts nodes gears statistics",
    python_requires=">=3.9",
)
