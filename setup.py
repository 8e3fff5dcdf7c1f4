from setuptools import setup, find_packages

setup(
    name="bump-merger",
    version="1.0.0",
    description="Approve and merge green dependency-update pull requests by semver bump",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "rich>=13.0.0",
        "click>=8.1.0",
        "semver>=3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bump-merger=bump_merger.cli:main",
        ],
    },
)
