from setuptools import setup, find_packages


setup(
    name="tarheaders",
    version="0.1",
    packages=find_packages(include=["tarheaders", "tarheaders.*"]),
    description="Stream tar archive entry headers as normalized JSON lines without extracting payloads.",
    python_requires=">=3.9",
    install_requires=[
        "zstandard>=0.22.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "tarheaders=tarheaders.cli:main",
        ]
    },
)
