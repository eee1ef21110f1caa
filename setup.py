from setuptools import setup, find_packages

setup(
    name="empowerhub",
    version="1.0.0",
    packages=find_packages(include=["empowerhub", "empowerhub.*"]),
    install_requires=[
        "django>=4.2",
        "djangorestframework",
        "drf-spectacular",
        "python-decouple",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-django",
        ],
    },
    python_requires=">=3.11",
)
