from setuptools import setup, find_packages

setup(
    name="responsible_ml",
    version="1.0.0",
    description="Explainable risk models for tabular health data",
    author="Responsible ML Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["cli"],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.23.0",
        "pandas>=1.5.0,<3.0",
        "scipy>=1.10.0",
        "scikit-learn>=1.1.0",
        "shap>=0.41.0",
        "dalex>=1.7.0",
        "matplotlib>=3.6.0",
        "seaborn>=0.12.0",
        "tqdm>=4.66.0",
        "joblib>=1.2.0",
        "click>=8.1.0",
        "tabulate>=0.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-mock>=3.14.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "responsible-ml=cli:cli",
        ]
    },
)
