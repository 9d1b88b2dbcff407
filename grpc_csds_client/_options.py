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
"""Process-wide options of a CSDS client session."""

from dataclasses import dataclass
import math

from grpc_csds_client import _errors

DEFAULT_SERVICE_URI = "trafficdirector.googleapis.com:443"

SUPPORTED_PLATFORMS = ("gcp",)
SUPPORTED_AUTHN_MODES = ("auto", "jwt")
SUPPORTED_FILTER_MODES = ("prefix", "suffix", "regex")


@dataclass(frozen=True)
class SessionOptions:
    """Options captured once at start-up.

    Attributes:
      service_uri: Address of the CSDS server.
      platform: The control plane platform. Only "gcp" is supported.
      authn_mode: How to authenticate, "auto" or "jwt".
      request_file: Path of a YAML request document.
      request_yaml: An inline YAML request document. Merged on top of
        request_file when both are given.
      jwt_file: Service account key file used by the "jwt" mode.
      config_file: Where to save the detailed config dump. The dump is
        printed when empty.
      monitor_interval: Seconds between two requests. Zero runs once.
      filter_mode: How filter_pattern is matched against client ids.
      filter_pattern: Only clients whose id matches are reported. Empty
        disables filtering.
    """

    service_uri: str = DEFAULT_SERVICE_URI
    platform: str = "gcp"
    authn_mode: str = "auto"
    request_file: str = ""
    request_yaml: str = ""
    jwt_file: str = ""
    config_file: str = ""
    monitor_interval: float = 0.0
    filter_mode: str = "prefix"
    filter_pattern: str = ""

    def __post_init__(self):
        if self.platform not in SUPPORTED_PLATFORMS:
            raise _errors.UnsupportedOptionError(
                f"{self.platform} platform is not supported, list of"
                f" supported platforms: {', '.join(SUPPORTED_PLATFORMS)}"
            )
        if self.filter_mode and self.filter_mode not in SUPPORTED_FILTER_MODES:
            raise _errors.UnsupportedOptionError(
                f"{self.filter_mode} filter mode is not supported, list of"
                " supported filter modes:"
                f" {', '.join(SUPPORTED_FILTER_MODES)}"
            )
        if self.filter_pattern and not self.filter_mode:
            raise _errors.UnsupportedOptionError(
                "a filter mode is required with a filter pattern, list of"
                " supported filter modes:"
                f" {', '.join(SUPPORTED_FILTER_MODES)}"
            )
        if not math.isfinite(self.monitor_interval) or (
            self.monitor_interval < 0
        ):
            raise _errors.UnsupportedOptionError(
                "monitor interval must be a finite number of seconds not less"
                f" than zero, got {self.monitor_interval}"
            )
