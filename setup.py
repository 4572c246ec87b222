"""Setup script for the planet surface generator package."""

from setuptools import setup, find_packages

setup(
    name="planetsurface",
    version="0.1.0",
    description="Deterministic procedural surface textures for planets and moons",
    packages=find_packages(include=['src', 'src.*']),
    package_data={
        "": ["*.md", "*.txt"],
    },
    include_package_data=True,
    install_requires=[
        "numpy",
        "scipy",
        "matplotlib",
    ],
    extras_require={
        "tests": ["pytest"],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Graphics",
    ],
    python_requires=">=3.8",
)
