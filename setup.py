from setuptools import setup, find_packages


setup(
    name="runarc",
    version="0.1",
    packages=find_packages(include=["runarc", "runarc.*"]),
    description="A minimal file archiver: manifest-first container with run-length encoded payloads.",
    author="vercingetorx",
    python_requires=">=3.9",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "runarc=runarc.cli:main",
        ]
    },
)
