from setuptools import setup, find_packages

setup(
    name="hunk_editor",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    author="Uday Kanth",
    description="Line-range hunks with staleness detection and staged, previewable edits.",
)
