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
"""Tests of the NodeMatcher builder."""

import logging
import os
import tempfile
import unittest

from envoy.type.matcher.v3 import node_pb2
from google.protobuf import json_format
import yaml

import grpc_csds_client
from grpc_csds_client import _matcher

_REQUEST_FILE = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "testdata", "request.yaml"
)


def _struct_matcher(key, value):
    return {"path": [{"key": key}], "value": {"string_match": {"exact": value}}}


def _request_yaml(project=None, network=None, mesh_scope=None, node_id=None):
    node_metadatas = []
    if project is not None:
        node_metadatas.append(
            _struct_matcher(_matcher.GCP_PROJECT_NUMBER_KEY, project)
        )
    if network is not None:
        node_metadatas.append(
            _struct_matcher(_matcher.GCP_NETWORK_NAME_KEY, network)
        )
    if mesh_scope is not None:
        node_metadatas.append(
            _struct_matcher(_matcher.GCP_MESH_SCOPE_KEY, mesh_scope)
        )
    document = {"node_matchers": [{"node_metadatas": node_metadatas}]}
    if node_id is not None:
        document["node"] = {"id": node_id}
    return yaml.safe_dump(document)


def _node_matcher(*key_values):
    return json_format.ParseDict(
        {
            "node_metadatas": [
                _struct_matcher(key, value) for key, value in key_values
            ]
        },
        node_pb2.NodeMatcher(),
    )


class BuildTest(unittest.TestCase):
    def test_request_file(self):
        selection = _matcher.build(request_file=_REQUEST_FILE)

        self.assertEqual(1, len(selection.node_matchers))
        self.assertEqual(
            "projects/123456789/networks/default/nodes/",
            selection.node_matchers[0].node_id.prefix,
        )
        self.assertEqual("csds-client", selection.node.id)
        self.assertEqual(
            "123456789",
            _matcher.get_value_by_key(
                selection.node_matchers, _matcher.GCP_PROJECT_NUMBER_KEY
            ),
        )

    def test_request_yaml_only(self):
        selection = _matcher.build(
            request_yaml=_request_yaml(
                project="42", mesh_scope="mesh", node_id="inline"
            )
        )

        self.assertEqual(1, len(selection.node_matchers))
        self.assertEqual("inline", selection.node.id)

    def test_missing_input(self):
        with self.assertRaises(grpc_csds_client.MissingInputError):
            _matcher.build()

    def test_merging_a_document_with_itself_changes_nothing(self):
        with open(_REQUEST_FILE, "r", encoding="utf-8") as request_file:
            request_yaml = request_file.read()

        single = _matcher.build(request_file=_REQUEST_FILE)
        merged = _matcher.build(
            request_file=_REQUEST_FILE, request_yaml=request_yaml
        )

        self.assertEqual(list(single.node_matchers), list(merged.node_matchers))
        self.assertEqual(single.node, merged.node)

    def test_request_yaml_overrides_and_extends_request_file(self):
        request_yaml = yaml.safe_dump(
            {
                "node_matchers": [
                    {
                        "node_id": {"exact": "projects/1/nodes/a"},
                        "node_metadatas": [
                            _struct_matcher(
                                _matcher.GCP_NETWORK_NAME_KEY, "other"
                            ),
                            _struct_matcher("EXTRA_KEY", "extra"),
                        ],
                    },
                    {"node_id": {"suffix": "-canary"}},
                ]
            }
        )

        selection = _matcher.build(
            request_file=_REQUEST_FILE, request_yaml=request_yaml
        )

        self.assertEqual(2, len(selection.node_matchers))
        first = selection.node_matchers[0]
        self.assertEqual("projects/1/nodes/a", first.node_id.exact)
        self.assertEqual(
            "123456789",
            _matcher.get_value_by_key(
                selection.node_matchers, _matcher.GCP_PROJECT_NUMBER_KEY
            ),
        )
        self.assertEqual(
            "other",
            _matcher.get_value_by_key(
                selection.node_matchers, _matcher.GCP_NETWORK_NAME_KEY
            ),
        )
        self.assertEqual(
            "extra",
            _matcher.get_value_by_key(selection.node_matchers, "EXTRA_KEY"),
        )
        self.assertEqual(
            [
                _matcher.GCP_PROJECT_NUMBER_KEY,
                _matcher.GCP_NETWORK_NAME_KEY,
                "EXTRA_KEY",
            ],
            [
                struct_matcher.path[0].key
                for struct_matcher in first.node_metadatas
            ],
        )
        self.assertEqual("-canary", selection.node_matchers[1].node_id.suffix)
        # The inline document has no node, so the file's node is kept.
        self.assertEqual("csds-client", selection.node.id)

    def test_request_yaml_node_replaces_request_file_node(self):
        selection = _matcher.build(
            request_file=_REQUEST_FILE,
            request_yaml=yaml.safe_dump(
                {"node_matchers": [], "node": {"id": "replacement"}}
            ),
        )

        self.assertEqual("replacement", selection.node.id)
        self.assertEqual("", selection.node.cluster)

    def test_scope_keys_must_be_exclusive(self):
        cases = (
            (None, None, False),
            ("default", None, True),
            (None, "mesh", True),
            ("default", "mesh", False),
        )
        for network, mesh_scope, valid in cases:
            with self.subTest(network=network, mesh_scope=mesh_scope):
                request_yaml = _request_yaml(
                    project="42", network=network, mesh_scope=mesh_scope
                )
                if valid:
                    _matcher.build(request_yaml=request_yaml)
                else:
                    with self.assertRaises(
                        grpc_csds_client.ConflictingFieldError
                    ):
                        _matcher.build(request_yaml=request_yaml)

    def test_empty_scope_value_counts_as_unset(self):
        with self.assertRaises(grpc_csds_client.ConflictingFieldError):
            _matcher.build(
                request_yaml=_request_yaml(
                    project="42", network="", mesh_scope=""
                )
            )

    def test_missing_project_number(self):
        with self.assertRaises(grpc_csds_client.MissingRequiredFieldError):
            _matcher.build(request_yaml=_request_yaml(network="default"))

    def test_unsupported_platform(self):
        with self.assertRaises(grpc_csds_client.UnsupportedOptionError):
            _matcher.build(request_file=_REQUEST_FILE, platform="aws")

    def test_invalid_documents(self):
        documents = (
            "- just\n- a list\n",
            "node: {id: x}\n",
            "node_matchers: {}\n",
            "node_matchers:\n  - unknown_field: 1\n",
            "node_matchers: []\nnode: {unknown: 1}\n",
            "node_matchers: [\n",
            "node_matchers: []\nnode:\n",
            "node_matchers:\n  - null\n",
            "node_matchers:\n  - just a string\n",
        )
        for document in documents:
            with self.subTest(document=document):
                with self.assertRaises(grpc_csds_client.InvalidDocumentError):
                    _matcher.build(request_yaml=document)

    def test_unreadable_request_file(self):
        with tempfile.TemporaryDirectory() as directory:
            with self.assertRaises(grpc_csds_client.InvalidDocumentError):
                _matcher.build(
                    request_file=os.path.join(directory, "missing.yaml")
                )

    def test_request_carries_only_the_node_id(self):
        selection = _matcher.build(request_file=_REQUEST_FILE)

        request = selection.to_request()

        self.assertEqual("csds-client", request.node.id)
        self.assertEqual("", request.node.cluster)
        self.assertEqual(
            list(selection.node_matchers), list(request.node_matchers)
        )


class GetValueByKeyTest(unittest.TestCase):
    def test_first_match_wins(self):
        node_matchers = (
            _node_matcher(("A", "1"), ("B", "2")),
            _node_matcher(("B", "3"), ("C", "4")),
        )

        self.assertEqual("2", _matcher.get_value_by_key(node_matchers, "B"))
        self.assertEqual("4", _matcher.get_value_by_key(node_matchers, "C"))

    def test_absent_key(self):
        node_matchers = (_node_matcher(("A", "1")),)

        self.assertEqual("", _matcher.get_value_by_key(node_matchers, "Z"))
        self.assertEqual("", _matcher.get_value_by_key((), "A"))

    def test_matchers_without_metadata_are_skipped(self):
        node_matchers = (
            node_pb2.NodeMatcher(),
            _node_matcher(("A", "1")),
        )

        self.assertEqual("1", _matcher.get_value_by_key(node_matchers, "A"))


if __name__ == "__main__":
    logging.basicConfig()
    unittest.main(verbosity=2)
