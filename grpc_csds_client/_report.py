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
"""Renders a ClientStatusResponse as a table of xDS config statuses."""

import collections
import re
import sys
from typing import Iterator, List, Sequence, Tuple

from envoy.service.status.v3 import csds_pb2

from grpc_csds_client import _detail
from grpc_csds_client import _errors

NO_CLIENTS_MESSAGE = "No xDS clients connected."
NOT_AVAILABLE = "N/A"

# The control plane reports the stream type of a client under this key of
# the node metadata.
STREAM_TYPE_METADATA_KEY = "XDS_STREAM_TYPE"

_ROW_FORMAT = "%-50s %-30s %-30s \n"
_HEADER = ("Client ID", "xDS stream type", "Config Status")

_XDS_KINDS = {
    "type.googleapis.com/envoy.config.cluster.v3.Cluster": "CDS",
    "type.googleapis.com/envoy.config.listener.v3.Listener": "LDS",
    "type.googleapis.com/envoy.config.route.v3.RouteConfiguration": "RDS",
    "type.googleapis.com/envoy.config.route.v3.ScopedRouteConfiguration": (
        "SRDS"
    ),
    "type.googleapis.com/envoy.config.endpoint.v3.ClusterLoadAssignment": (
        "EDS"
    ),
}


class ConfigReportRow(
    collections.namedtuple(
        "ConfigReportRow", ("client_id", "stream_type", "statuses")
    )
):
    """The report of one client.

    Attributes:
      client_id: The node id of the client.
      stream_type: The xDS stream type of the client, possibly empty.
      statuses: A tuple of (kind, status) pairs, e.g. ("CDS", "SYNCED"), or
        None if the client reported no xDS config at all.
    """

    def lines(self) -> Iterator[str]:
        if self.statuses is None:
            yield _ROW_FORMAT % (self.client_id, self.stream_type, NOT_AVAILABLE)
            return
        if not self.statuses:
            yield _ROW_FORMAT % (self.client_id, self.stream_type, "")
            return
        for index, (kind, status) in enumerate(self.statuses):
            config_status = f"{kind}   {status}"
            if index == 0:
                yield _ROW_FORMAT % (
                    self.client_id,
                    self.stream_type,
                    config_status,
                )
            else:
                yield _ROW_FORMAT % ("", "", config_status)


def filter_node_id(node_id: str, mode: str, pattern: str) -> bool:
    """Checks whether a node id matches a filter pattern.

    Args:
      node_id: The id to check.
      mode: One of "prefix", "suffix" or "regex".
      pattern: The pattern. A regex is searched for anywhere in the id.

    Returns:
      True if the id matches.

    Raises:
      InvalidPatternError: If a regex pattern does not compile.
      UnsupportedOptionError: If the mode is unknown.
    """
    if mode == "prefix":
        return node_id.startswith(pattern)
    elif mode == "suffix":
        return node_id.endswith(pattern)
    elif mode == "regex":
        try:
            return re.search(pattern, node_id) is not None
        except re.error as error:
            raise _errors.InvalidPatternError(
                f"invalid filter pattern {pattern!r}: {error}"
            ) from error
    else:
        raise _errors.UnsupportedOptionError(
            f"{mode} filter mode is not supported"
        )


def _stream_type(node) -> str:
    if STREAM_TYPE_METADATA_KEY not in node.metadata.fields:
        return ""
    value = node.metadata.fields[STREAM_TYPE_METADATA_KEY]
    if value.WhichOneof("kind") != "string_value":
        return ""
    return value.string_value


def _enum_name(message, field_name: str) -> str:
    value = getattr(message, field_name)
    field = message.DESCRIPTOR.fields_by_name[field_name]
    enum_value = field.enum_type.values_by_number.get(value)
    return enum_value.name if enum_value is not None else str(value)


def _status(generic_xds_config) -> str:
    # Control planes report config_status, xDS clients report client_status.
    if generic_xds_config.config_status:
        return _enum_name(generic_xds_config, "config_status")
    if generic_xds_config.client_status:
        return _enum_name(generic_xds_config, "client_status")
    return ""


def parse_config_status(
    generic_xds_configs: Sequence[csds_pb2.ClientConfig.GenericXdsConfig],
) -> List[Tuple[str, str]]:
    """Classifies xDS configs into (kind, status) pairs.

    Configs without a reported status are left out.

    Raises:
      UnsupportedConfigTypeError: If a config has an unknown type URL.
    """
    config_statuses = []
    for generic_xds_config in generic_xds_configs:
        kind = _XDS_KINDS.get(generic_xds_config.type_url)
        if kind is None:
            raise _errors.UnsupportedConfigTypeError(
                f"unsupported xDS type {generic_xds_config.type_url!r}"
            )
        status = _status(generic_xds_config)
        if status:
            config_statuses.append((kind, status))
    return config_statuses


def _rows(response, options) -> Iterator[ConfigReportRow]:
    for client_config in response.config:
        client_id = client_config.node.id
        if options.filter_pattern and not filter_node_id(
            client_id, options.filter_mode, options.filter_pattern
        ):
            continue
        stream_type = _stream_type(client_config.node)
        if not client_config.generic_xds_configs:
            yield ConfigReportRow(client_id, stream_type, None)
        else:
            yield ConfigReportRow(
                client_id,
                stream_type,
                tuple(parse_config_status(client_config.generic_xds_configs)),
            )


def print_response(response, options, out=None, detail_printer=None):
    """Prints the report of a ClientStatusResponse.

    Every row is complete before it is written, so a failure never leaves a
    partial row behind.

    Args:
      response: An envoy.service.status.v3.ClientStatusResponse, or None if
        the stream ended without one.
      options: The SessionOptions, for the filter and the detailed dump.
      out: A text stream. Defaults to sys.stdout.
      detail_printer: Called as detail_printer(response, options, out) once
        if any reported client has xDS configs. Defaults to
        print_detailed_config.

    Raises:
      UnsupportedConfigTypeError: If a config has an unknown type URL.
      InvalidPatternError: If the regex filter pattern does not compile.
    """
    out = sys.stdout if out is None else out
    if detail_printer is None:
        detail_printer = _detail.print_detailed_config
    if response is None or not response.config:
        out.write(NO_CLIENTS_MESSAGE + "\n")
        return

    out.write(_ROW_FORMAT % _HEADER)
    has_xds_config = False
    for row in _rows(response, options):
        if row.statuses is not None:
            has_xds_config = True
        out.write("".join(row.lines()))

    if has_xds_config:
        detail_printer(response, options, out)
