from setuptools import find_packages, setup

setup(
    name="content-workflows",
    version="1.0.0",
    packages=find_packages(include=["content_workflows", "content_workflows.*"]),
    install_requires=[line for line in open("requirements-core.txt").read().splitlines() if line],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.10",
    entry_points={
        "console_scripts": [
            "content-workflows=content_workflows.cli:main",
        ],
    },
)
