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
"""A Client Status Discovery Service (CSDS) client.

Asks a control plane for the xDS config status of the clients connected to it
and prints it as a table, once or periodically.
"""

from grpc_csds_client._errors import ConfigurationError
from grpc_csds_client._errors import ConflictingFieldError
from grpc_csds_client._errors import CredentialsError
from grpc_csds_client._errors import Error
from grpc_csds_client._errors import FatalProtocolError
from grpc_csds_client._errors import InvalidDocumentError
from grpc_csds_client._errors import InvalidPatternError
from grpc_csds_client._errors import MissingInputError
from grpc_csds_client._errors import MissingRequiredFieldError
from grpc_csds_client._errors import ProtocolError
from grpc_csds_client._errors import RenderError
from grpc_csds_client._errors import TransientProtocolError
from grpc_csds_client._errors import UnsupportedAuthError
from grpc_csds_client._errors import UnsupportedConfigTypeError
from grpc_csds_client._errors import UnsupportedOptionError
from grpc_csds_client._matcher import NodeSelection
from grpc_csds_client._matcher import build as build_node_selection
from grpc_csds_client._matcher import get_value_by_key
from grpc_csds_client._options import SessionOptions
from grpc_csds_client._report import ConfigReportRow
from grpc_csds_client._report import print_response
from grpc_csds_client._session import ErrorKind
from grpc_csds_client._session import classify
from grpc_csds_client._session import run

__all__ = (
    "ConfigReportRow",
    "ConfigurationError",
    "ConflictingFieldError",
    "CredentialsError",
    "Error",
    "ErrorKind",
    "FatalProtocolError",
    "InvalidDocumentError",
    "InvalidPatternError",
    "MissingInputError",
    "MissingRequiredFieldError",
    "NodeSelection",
    "ProtocolError",
    "RenderError",
    "SessionOptions",
    "TransientProtocolError",
    "UnsupportedAuthError",
    "UnsupportedConfigTypeError",
    "UnsupportedOptionError",
    "build_node_selection",
    "classify",
    "get_value_by_key",
    "print_response",
    "run",
)
