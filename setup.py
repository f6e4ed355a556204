#!/usr/bin/env python
# -*- encoding: utf-8 -*-
import io
import re
from os.path import dirname, join

from setuptools import find_packages, setup


def read(*names, **kwargs):
    return io.open(
        join(dirname(__file__), *names), encoding=kwargs.get("encoding", "utf8")
    ).read()


def find_version(*file_paths):
    contents = read(*file_paths)
    match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", contents, re.M)
    if match:
        return match.group(1)
    raise RuntimeError("Unable to find version string.")


TESTS_REQUIRE = ["pytest", "pytest-mock", "freezegun"]

setup(
    name="govukcli",
    python_requires=">=3.8",
    version=find_version("src", "govukcli", "__init__.py"),
    license="MIT",
    description="CLI to switch environments and run commands with temporary AWS credentials",
    long_description="""`govuk` is an operator CLI that records the current environment
("context"), routes SSH through that environment's jump host, and runs the AWS
CLI or any other program with short-lived credentials obtained by assuming the
environment's role with an MFA-backed session. Credentials are cached on disk
and reused until they are about to expire.""",
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Operating System :: POSIX",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Utilities",
    ],
    keywords=["govuk", "aws", "mfa", "sts", "cli"],
    install_requires=[
        "boto3>=1.12.39",
        "botocore",
        "colorama",
        "PyYAML>=3.10",
    ],
    tests_require=TESTS_REQUIRE,
    extras_require={"test": TESTS_REQUIRE},
    entry_points={
        "console_scripts": [
            "govuk = govukcli.cli:main",
        ]
    },
)
