# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="compgraph",
    version="1.0.0",
    description="Component composition graph and used/unused classification for JS/TS UI projects",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["compgraph", "compgraph.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'compgraph=compgraph.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
