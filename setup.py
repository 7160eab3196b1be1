# -*- coding: utf-8 -*-
from setuptools import setup, find_packages
from os.path import abspath, dirname, join
from glob import glob

this_dir = abspath(dirname(__file__))
with open(join(this_dir, "LICENSE")) as f:
    license = f.read()

with open(join(this_dir, "README.md"), encoding="utf-8") as file:
    long_description = file.read()

with open(join(this_dir, "requirements.txt")) as f:
    requirements = [line for line in f.read().split("\n") if line]

scripts = glob("scripts/*.py")

setup(
        name="occupancy",
        version="1.0",
        description="Exploratory report on U.S. hospital bed occupancy during 2020.",
        long_description_content_type='text/markdown',
        long_description=long_description,
        scripts=scripts,
        license="MIT license",
        install_requires=requirements,
        extras_require={"test": ["pytest"]},
        packages=find_packages(include=["occupancy", "occupancy.*"]),
        include_package_data=True
)
