# Copyright 2026 gRPC authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Setup module for the CSDS client."""

import os
import sys

import setuptools

# Manually insert the source directory into the Python path for local module
# imports to succeed
sys.path.insert(0, os.path.abspath("."))

import csds_client_version
import python_version

INSTALL_REQUIRES = (
    "grpcio>=1.62.0",
    "grpcio-status>=1.62.0",
    "googleapis-common-protos>=1.63.0",
    "protobuf>=4.21.6,<7.0.0",
    "xds-protos>=1.62.0",
    "google-auth>=1.17.2",
    "requests>=2.14.2",
    "PyYAML>=5.4",
)

EXTRAS_REQUIRE = {
    "test": (
        "grpcio-testing>=1.62.0",
        "pytest>=7.0",
        "coverage>=7.9.0",
    ),
}

PACKAGES = setuptools.find_packages(include=("grpc_csds_client",))

ENTRY_POINTS = {
    "console_scripts": ("csds_client = grpc_csds_client._cli:main",),
}

CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "Programming Language :: Python",
    "Programming Language :: Python :: 3",
] + [
    f"Programming Language :: Python :: {x}"
    for x in python_version.SUPPORTED_PYTHON_VERSIONS
]

if __name__ == "__main__":
    setuptools.setup(
        name="grpcio-csds-client",
        version=csds_client_version.VERSION,
        description="Client Status Discovery Service (CSDS) client",
        license="Apache License 2.0",
        packages=PACKAGES,
        classifiers=CLASSIFIERS,
        python_requires=f">={python_version.MIN_PYTHON_VERSION}",
        install_requires=INSTALL_REQUIRES,
        extras_require=EXTRAS_REQUIRE,
        entry_points=ENTRY_POINTS,
    )
