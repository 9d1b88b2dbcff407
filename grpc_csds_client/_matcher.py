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
"""Builds the NodeMatchers and Node sent in every ClientStatusRequest."""

import collections
import logging
from typing import Any, List, Mapping, Optional, Sequence

from envoy.config.core.v3 import base_pb2
from envoy.service.status.v3 import csds_pb2
from envoy.type.matcher.v3 import node_pb2
from google.protobuf import json_format
import yaml

from grpc_csds_client import _errors

_LOGGER = logging.getLogger(__name__)

# Metadata keys that carry the Traffic Director project and scope.
GCP_PROJECT_NUMBER_KEY = "TRAFFICDIRECTOR_GCP_PROJECT_NUMBER"
GCP_NETWORK_NAME_KEY = "TRAFFICDIRECTOR_NETWORK_NAME"
GCP_MESH_SCOPE_KEY = "TRAFFICDIRECTOR_MESH_SCOPE_NAME"

_NODE_MATCHERS_KEY = "node_matchers"
_NODE_KEY = "node"


class NodeSelection(
    collections.namedtuple("NodeSelection", ("node_matchers", "node"))
):
    """The clients a CSDS request asks about.

    Attributes:
      node_matchers: A tuple of envoy.type.matcher.v3.NodeMatcher.
      node: The envoy.config.core.v3.Node identifying the requester.
    """

    def to_request(self) -> csds_pb2.ClientStatusRequest:
        return csds_pb2.ClientStatusRequest(
            node_matchers=self.node_matchers,
            node=base_pb2.Node(id=self.node.id),
        )


def get_value_by_key(
    node_matchers: Sequence[node_pb2.NodeMatcher], key: str
) -> str:
    """Returns the first exact string matched for a metadata key.

    Matchers are scanned in order, then their struct matchers, then the path
    segments of each struct matcher.

    Args:
      node_matchers: The NodeMatchers to search.
      key: A node metadata key.

    Returns:
      The exact string value, or an empty string if the key is absent.
    """
    for node_matcher in node_matchers:
        for struct_matcher in node_matcher.node_metadatas:
            for segment in struct_matcher.path:
                if segment.key == key:
                    return struct_matcher.value.string_match.exact
    return ""


def _load_document(text: str, source: str) -> Mapping[str, Any]:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as error:
        raise _errors.InvalidDocumentError(
            f"unable to parse {source}: {error}"
        ) from error
    if not isinstance(document, dict):
        raise _errors.InvalidDocumentError(
            f"{source} must be a YAML mapping with a {_NODE_MATCHERS_KEY} list"
        )
    return document


def _read_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as request_file:
            return request_file.read()
    except OSError as error:
        raise _errors.InvalidDocumentError(
            f"unable to read request file {path}: {error}"
        ) from error


def _parse_node_matchers(
    document: Mapping[str, Any], source: str
) -> List[node_pb2.NodeMatcher]:
    raw_node_matchers = document.get(_NODE_MATCHERS_KEY)
    if not isinstance(raw_node_matchers, list):
        raise _errors.InvalidDocumentError(
            f"{source} has no {_NODE_MATCHERS_KEY} list"
        )
    node_matchers = []
    for index, raw_node_matcher in enumerate(raw_node_matchers):
        if not isinstance(raw_node_matcher, dict):
            raise _errors.InvalidDocumentError(
                f"{_NODE_MATCHERS_KEY}[{index}] in {source} is not a mapping"
            )
        try:
            node_matchers.append(
                json_format.ParseDict(raw_node_matcher, node_pb2.NodeMatcher())
            )
        except json_format.ParseError as error:
            raise _errors.InvalidDocumentError(
                f"invalid {_NODE_MATCHERS_KEY}[{index}] in {source}: {error}"
            ) from error
    return node_matchers


def _parse_node(
    document: Mapping[str, Any], source: str
) -> Optional[base_pb2.Node]:
    if _NODE_KEY not in document:
        return None
    if not isinstance(document[_NODE_KEY], dict):
        raise _errors.InvalidDocumentError(
            f"{_NODE_KEY} in {source} is not a mapping"
        )
    try:
        return json_format.ParseDict(document[_NODE_KEY], base_pb2.Node())
    except json_format.ParseError as error:
        raise _errors.InvalidDocumentError(
            f"invalid {_NODE_KEY} in {source}: {error}"
        ) from error


def _merge_node_matcher(
    target: node_pb2.NodeMatcher, source: node_pb2.NodeMatcher
) -> None:
    if source.HasField("node_id"):
        target.node_id.CopyFrom(source.node_id)
    for struct_matcher in source.node_metadatas:
        for existing in target.node_metadatas:
            if list(existing.path) == list(struct_matcher.path):
                existing.CopyFrom(struct_matcher)
                break
        else:
            target.node_metadatas.add().CopyFrom(struct_matcher)


def _validate_gcp(node_matchers: Sequence[node_pb2.NodeMatcher]) -> None:
    if not get_value_by_key(node_matchers, GCP_PROJECT_NUMBER_KEY):
        raise _errors.MissingRequiredFieldError(
            f"missing field {GCP_PROJECT_NUMBER_KEY} in NodeMatcher"
        )
    network_name = get_value_by_key(node_matchers, GCP_NETWORK_NAME_KEY)
    mesh_scope = get_value_by_key(node_matchers, GCP_MESH_SCOPE_KEY)
    if not network_name and not mesh_scope:
        raise _errors.ConflictingFieldError(
            f"must set either {GCP_NETWORK_NAME_KEY} or {GCP_MESH_SCOPE_KEY}"
        )
    if network_name and mesh_scope:
        raise _errors.ConflictingFieldError(
            f"cannot set both {GCP_NETWORK_NAME_KEY} and {GCP_MESH_SCOPE_KEY}"
        )


_VALIDATORS = {
    "gcp": _validate_gcp,
}


def build(
    request_file: str = "", request_yaml: str = "", platform: str = "gcp"
) -> NodeSelection:
    """Parses and validates the request documents.

    The request file is parsed first. The inline document is then merged on
    top of it: its node replaces the file's node, and its i-th NodeMatcher
    is merged into the file's i-th NodeMatcher, or appended when the file
    has fewer.

    Args:
      request_file: Path of a YAML request document.
      request_yaml: An inline YAML request document.
      platform: The platform whose required fields are checked.

    Returns:
      A validated NodeSelection.

    Raises:
      MissingInputError: If neither document is given.
      InvalidDocumentError: If a document cannot be parsed.
      MissingRequiredFieldError: If the project number is missing.
      ConflictingFieldError: If not exactly one scope key is set.
      UnsupportedOptionError: If the platform is not supported.
    """
    if not request_file and not request_yaml:
        raise _errors.MissingInputError(
            "missing request yaml, set request_file or request_yaml"
        )
    validate = _VALIDATORS.get(platform)
    if validate is None:
        raise _errors.UnsupportedOptionError(
            f"{platform} platform is not supported, list of supported"
            f" platforms: {', '.join(_VALIDATORS)}"
        )

    node_matchers = []
    node = base_pb2.Node()
    if request_file:
        source = f"request file {request_file}"
        document = _load_document(_read_file(request_file), source)
        node_matchers.extend(_parse_node_matchers(document, source))
        parsed_node = _parse_node(document, source)
        if parsed_node is not None:
            node = parsed_node
    if request_yaml:
        source = "request yaml"
        document = _load_document(request_yaml, source)
        for index, node_matcher in enumerate(
            _parse_node_matchers(document, source)
        ):
            if index < len(node_matchers):
                _merge_node_matcher(node_matchers[index], node_matcher)
            else:
                node_matchers.append(node_matcher)
        parsed_node = _parse_node(document, source)
        if parsed_node is not None:
            node = parsed_node

    validate(node_matchers)
    _LOGGER.debug(
        "Built %d node matcher(s) for node %r", len(node_matchers), node.id
    )
    return NodeSelection(tuple(node_matchers), node)


def from_options(options) -> NodeSelection:
    return build(
        request_file=options.request_file,
        request_yaml=options.request_yaml,
        platform=options.platform,
    )
