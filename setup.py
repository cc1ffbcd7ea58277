"""
Setup configuration for PDI to Hop Converter
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="pdi-to-hop",
    version="0.2.0",
    author="Practicante Entix",
    author_email="contacto@entix.cl",
    description="Herramienta CLI para convertir transformaciones PDI (.ktr) a pipelines Hop (.hpl)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
    install_requires=[
        "lxml>=4.9.0",
        "jinja2>=3.1.0",
        "jsonschema>=4.17.0",
        "python-dotenv>=1.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.0",
            "black>=23.0.0",
            "pylint>=2.17.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pdi-to-hop=pdi_to_hop.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "pdi_to_hop": ["resources/*.json", "templates/*.j2"],
    },
)
