"""Setup script for code-extractor"""
from setuptools import setup
from pathlib import Path
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""
setup(
    name="code-extractor",
    version="1.0.0",
    author="Code Extractor Project",
    author_email="info@code-extractor.dev",
    description="Extract source files from a ZIP archive into a single annotated text report",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=["code_extractor"],
    python_requires=">=3.9",
    install_requires=["rich>=12.0.0", "tqdm>=4.60.0"],
    extras_require={
        "test": ["pytest>=6.0.0", "pytest-asyncio"],
        "dev": ["pytest>=6.0.0", "black>=22.0.0", "flake8>=4.0.0", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": [
            "code-extractor=code_extractor:cli_main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Tools",
        "Topic :: System :: Archiving",
    ],
)
