from pathlib import Path
from setuptools import setup, find_packages

PROJECT_ROOT = Path(__file__).parent.resolve()
README = PROJECT_ROOT / "README.md"

setup(
    name="deployer",
    version="1.0.0",
    description="Release and deployment control plane driving helm, docker and trivy.",
    long_description=README.read_text(encoding="utf-8") if README.exists() else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "ruamel.yaml>=0.17",
        "requests>=2.28",
        "rich>=13.0",
        "typer>=0.9",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "deployer=deployer.cli:main",
        ],
    },
)
