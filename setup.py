from setuptools import setup, find_packages


setup(
    name="rarscan",
    version="0.1",
    packages=find_packages(include=["rarscan", "rarscan.*"]),
    description="Metadata-only indexer for RAR 4.x archives: list members without extracting them.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "rarscan=rarscan.cli:main",
        ]
    },
)
