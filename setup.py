# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="htmlfuse",
    version="1.0.0",
    description="Flattens HTML import graphs into a single self-contained document",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["htmlfuse", "htmlfuse.*"]),
    install_requires=[
        "beautifulsoup4>=4.10",
        "lxml",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'htmlfuse=htmlfuse.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
