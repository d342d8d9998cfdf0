# setup.py
from setuptools import setup, find_packages

setup(
    name="chashavshavon",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pyluach",
        "python-dateutil",
        "matplotlib",
        "reportlab",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "chashavshavon=chashavshavon.main:run_wizard",
        ],
    },
)
