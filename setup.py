import re

from setuptools import find_packages, setup

version = re.search('^__version__\\s*=\\s*"(.*)"', open("intervalrunner/__init__.py").read(), re.M).group(1)

setup(
    name="interval-runner",
    version=version,
    description="Run a task at a fixed interval until the process receives a termination signal",
    packages=find_packages(include=["intervalrunner", "intervalrunner.*"]),
    install_requires=["arrow", "dacite", "prometheus-client", "python-dotenv", "pyyaml", "typing_extensions"],
    extras_require={"tests": ["pytest"]},
    entry_points={"console_scripts": ["interval-runner=intervalrunner.__main__:main"]},
    python_requires=">=3.10",
)
