from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="fnstack",
    version="0.3.0",
    author="fnstack contributors",
    description="Declarative composition of serverless function routes and identities.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*", "examples")),
    package_data={"fnstack.schemas": ["*.json"]},
    python_requires=">=3.10",
    install_requires=["PyYAML>=6.0", "jsonschema>=4.0"],
    extras_require={"dev": ["pytest"]},
    tests_require=["pytest"],
    entry_points={"console_scripts": ["fnstack=fnstack.cli:main"]},
)
