"""Setup configuration for the jobsync package."""

from setuptools import find_packages, setup

setup(
    name="jobsync",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"jobsync": ["data/*.yaml"]},
    include_package_data=True,
    install_requires=[
        "pydantic>=2.6",
        "requests>=2.31",
        "numpy>=1.24",
        "rapidfuzz>=3.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    python_requires=">=3.9",
    author="JobSync Team",
    description="Multi-algorithm applicant-to-job matching and ranking engine",
)
