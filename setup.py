from __future__ import annotations

import os
import sys

from setuptools import find_packages, setup

dependencies = [
    "anyio>=4.2.0",  # Deadlines on ledger queries
    "chia_rs>=0.14.0",  # BLS signatures, sized ints and bytes, clvm runtime
    "chia_puzzles_py>=0.20.1",  # Compiled standard, CAT, settlement and NFT puzzles
    "clvm>=0.9.8",  # SExp and its wire format
    "aiohttp>=3.9.2",  # HTTP client for full node rpc
    "colorlog>=6.8.2",  # Adds color to logs
    "concurrent-log-handler>=0.9.25",  # Concurrently log and rotate logs
    "filelock>=3.13.1",  # For reading and writing config multiprocess and multithread safely  (non-reentrant locks)
    "importlib-resources>=6.1.1",  # Reads the packaged initial config
    "PyYAML>=6.0.1",  # Used for config file format
    "click>=8.1.3",  # For the CLI
    "typing-extensions>=4.10.0",  # typing backports like Protocol and TypedDict
]

test_dependencies = [
    "pytest>=8.0.2",
    "pytest-cov>=4.1.0",
    "pytest-mock>=3.12.0",
    "pytest-xdist>=3.5.0",
]

dev_dependencies = [
    *test_dependencies,
    "build>=1.0.3",
    "coverage>=7.4.1",
    "pre-commit>=3.6.0",
    "pylint>=3.0.3",
    "isort>=5.13.2",
    "flake8>=7.0.0",
    "mypy>=1.8.0",
    "black>=23.12.1",
    "types-pyyaml>=6.0.12.12",
    "types-setuptools>=69.1.0.20240217",
]

kwargs = dict(
    name="offerkit",
    version="0.1.0",
    description="Build, sign, encode and decode Chia offers.",
    license="Apache License",
    python_requires=">=3.9, <4",
    keywords="chia offer atomic swap",
    install_requires=dependencies,
    extras_require=dict(
        dev=dev_dependencies,
        test=test_dependencies,
    ),
    packages=find_packages(include=["offerkit", "offerkit.*"]),
    entry_points={
        "console_scripts": [
            "offerkit = offerkit.cmds.offerkit:main",
        ]
    },
    package_data={
        "": ["py.typed"],
        "offerkit.util": ["initial-*.yaml"],
    },
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    zip_safe=False,
)

if "setup_file" in sys.modules:
    # include dev deps in regular deps when run in snyk
    dependencies.extend(dev_dependencies)

if len(os.environ.get("OFFERKIT_SKIP_SETUP", "")) < 1:
    setup(**kwargs)  # type: ignore
