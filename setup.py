from pathlib import Path

from setuptools import find_packages, setup


this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")


setup(
    name="perps-session-bot",
    version="0.1.0",
    description="Scripted trading session against a perpetual-futures exchange gateway",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    py_modules=["config", "run_session"],
    install_requires=[
        "requests",
        "urllib3",
        "web3",
        "eth-account",
        "pyyaml",  # Optional session overrides file
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "perps-session=run_session:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
