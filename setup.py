from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="hydroeda",
    version="0.1.0",
    author="hydroeda",
    description="Exploratory time-series analysis of daily river discharge",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["hydroeda", "hydroeda.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Hydrology",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "matplotlib>=3.4.0",
        "scipy>=1.7.0",
        "requests>=2.25.0",
        "statsmodels>=0.13.0",
        "click>=8.0",
    ],
    extras_require={
        "dev": ["pytest>=7.0", "pytest-cov", "black", "flake8"],
    },
    entry_points={
        "console_scripts": [
            "hydroeda=hydroeda.cli:cli",
        ],
    },
)
