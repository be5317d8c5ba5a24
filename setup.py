"""Install ACM/IDM login session store package."""

from setuptools import setup, find_packages

setup(
    name='acmidm-login',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    install_requires=[
        "rdflib",
        "requests",
        "pydantic>=2.5",
        "pytz",
        "python-json-logger",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
        ]
    },
    zip_safe=False
)
