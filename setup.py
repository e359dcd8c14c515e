from setuptools import setup, find_packages

setup(
    name="treelox",
    version="0.1.0",
    description="treelox - tree-walking interpreter for a small Lox dialect with classes and closures",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="treelox Project",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "termcolor>=2.3",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "treelox=treelox.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Interpreters",
    ],
)
