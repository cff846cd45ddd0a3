
# setup.py

from setuptools import setup, find_packages

setup(
    name="coverage-editor",
    version="0.1.0",
    description="Interactive geometry editor and playback engine for a coverage path planner",
    packages=find_packages(include=["coverage_editor", "coverage_editor.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pygame>=2.1",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": [
            "coverage-editor=coverage_editor.visualization.demo_editor:main",
        ],
    },
)
