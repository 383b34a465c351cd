from setuptools import find_packages, setup
from pathlib import Path

base_path = Path(__file__).resolve().parent
with open(base_path / "readme.md", "r", encoding="utf-8") as f:
    long_description = f.read()

with open(base_path / "requirements.txt") as f:
    required = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="RefHarmonizer",
    version="0.1.0",
    description="Reconcile free-text values against reference tables, validate lookups and suggest column mappings",
    package_dir={"": "."},
    packages=find_packages(where=".", exclude=["tests", "tests.*"]),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "License :: OSI Approved :: MIT License",
    ],
    install_requires=required,
    extras_require={
        "test": ["pytest>=7"],
    },
    python_requires=">3.10",
)
