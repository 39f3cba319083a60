from setuptools import setup, find_packages  # ignore: type

setup(
    name="resource_migrator",
    version="1.0.0",
    description="Migrates indices, index templates, ingest pipelines and stored scripts between search clusters",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=["requests", "boto3", "botocore", "pyyaml", "Click", "cerberus", "jsondiff"],
    extras_require={
        "test": ["pytest", "pytest-mock", "requests-mock", "moto"],
    },
    entry_points={
        "console_scripts": [
            "resource-migrator = resource_migrator.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: Apache Software License",
    ],
)
