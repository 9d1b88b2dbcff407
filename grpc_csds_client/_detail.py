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
"""Dumps a whole ClientStatusResponse for detailed inspection."""

import logging
import sys

# The resource modules register the xDS types packed in the xds_config Any
# fields, so that they can be expanded in the JSON dump.
# pylint: disable=unused-import
from envoy.config.cluster.v3 import cluster_pb2
from envoy.config.endpoint.v3 import endpoint_pb2
from envoy.config.listener.v3 import listener_pb2
from envoy.config.route.v3 import route_pb2
from envoy.config.route.v3 import scoped_route_pb2
# pylint: enable=unused-import
from google.protobuf import json_format
from google.protobuf import text_format

_LOGGER = logging.getLogger(__name__)


def format_detailed_config(response):
    try:
        return json_format.MessageToJson(
            response, preserving_proto_field_name=True, indent=2
        )
    except TypeError as error:
        # Raised when an Any payload has a type unknown to the pool.
        _LOGGER.warning(
            "Unable to render config as JSON (%s), using text format", error
        )
        return text_format.MessageToString(response)


def print_detailed_config(response, options, out=None):
    """Prints or saves the detailed config of a response.

    Args:
      response: An envoy.service.status.v3.ClientStatusResponse.
      options: The SessionOptions. When options.config_file is set the dump is
        written to that file instead of out.
      out: A text stream. Defaults to sys.stdout.
    """
    detailed_config = format_detailed_config(response)
    if options.config_file:
        with open(options.config_file, "w", encoding="utf-8") as config_file:
            config_file.write(detailed_config)
            config_file.write("\n")
        _LOGGER.info("Config has been saved to %s", options.config_file)
    else:
        out = sys.stdout if out is None else out
        out.write(detailed_config)
        out.write("\n")
