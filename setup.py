from setuptools import setup


setup(
    name="bulk-import",
    version="0.3.0",
    description="Schema-driven upload templates and validation for bulk data entry (CSV and Excel)",
    packages=["bulk_import"],
    python_requires=">=3.10",
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "bulk-import=bulk_import.cli:main",
        ]
    },
)
