"""Setup file for led-migrate."""

from setuptools import setup, find_packages

setup(
    name="led-migrate",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    include_package_data=True,
    install_requires=[
        "docker>=7.0.0",
        "click>=8.1.7",
        "tabulate>=0.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "led-migrate=led_migrate.cli:main",
        ],
    },
    description="Move volume data into and out of a Lemmy-Easy-Deploy installation",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    keywords="docker, podman, volumes, migration, lemmy",
    python_requires=">=3.8",
)
