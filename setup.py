from setuptools import setup, find_packages

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="mcmc-landscape",
    version="0.1.0",
    description="Visualise the paths of MCMC samplers over a posterior surface",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["landscape", "landscape.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "matplotlib>=3.6",
        "inference-tools>=0.15.1",
    ],
    extras_require={
        "tests": ["pytest", "hypothesis", "freezegun"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
