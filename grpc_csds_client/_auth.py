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
"""Authenticated channels to the CSDS server."""

import collections
import logging

from google import auth as google_auth
from google.auth import exceptions as google_auth_exceptions
from google.auth import jwt as google_auth_jwt
from google.auth.transport import grpc as google_auth_transport_grpc
from google.auth.transport import requests as google_auth_transport_requests
import grpc

from grpc_csds_client import _errors
from grpc_csds_client import _matcher

_LOGGER = logging.getLogger(__name__)

_CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
_USER_PROJECT_METADATA_KEY = "x-goog-user-project"


class Connection(collections.namedtuple("Connection", ("channel", "metadata"))):
    """An authenticated channel.

    Attributes:
      channel: A grpc.Channel to the CSDS server.
      metadata: Metadata to send with every call on the channel.
    """


def _secure_channel(uri, call_credentials):
    channel_credentials = grpc.composite_channel_credentials(
        grpc.ssl_channel_credentials(), call_credentials
    )
    return grpc.secure_channel(uri, channel_credentials)


def _connect_gcp_with_jwt(options, unused_node_matchers):
    if not options.jwt_file:
        raise _errors.MissingInputError(
            "jwt authentication mode requires a jwt_file"
        )
    try:
        google_credentials = (
            google_auth_jwt.OnDemandCredentials.from_service_account_file(
                options.jwt_file
            )
        )
    except (
        OSError,
        ValueError,
        google_auth_exceptions.GoogleAuthError,
    ) as error:
        raise _errors.CredentialsError(
            f"unable to load the service account key {options.jwt_file} for"
            f" jwt authentication mode: {error}"
        ) from error
    call_credentials = grpc.metadata_call_credentials(
        google_auth_transport_grpc.AuthMetadataPlugin(
            credentials=google_credentials, request=None
        )
    )
    _LOGGER.debug("Connecting to %s with a JWT", options.service_uri)
    return Connection(_secure_channel(options.service_uri, call_credentials), ())


def _connect_gcp_with_auto(options, node_matchers):
    metadata = ()
    project_number = _matcher.get_value_by_key(
        node_matchers, _matcher.GCP_PROJECT_NUMBER_KEY
    )
    if project_number:
        metadata = ((_USER_PROJECT_METADATA_KEY, project_number),)
    try:
        google_credentials, unused_project_id = google_auth.default(
            scopes=[_CLOUD_PLATFORM_SCOPE]
        )
    except google_auth_exceptions.GoogleAuthError as error:
        raise _errors.CredentialsError(
            "unable to find application default credentials for auto"
            f" authentication mode: {error}"
        ) from error
    call_credentials = grpc.metadata_call_credentials(
        google_auth_transport_grpc.AuthMetadataPlugin(
            credentials=google_credentials,
            request=google_auth_transport_requests.Request(),
        )
    )
    _LOGGER.debug(
        "Connecting to %s with application default credentials",
        options.service_uri,
    )
    return Connection(
        _secure_channel(options.service_uri, call_credentials), metadata
    )


_CONNECTORS = {
    ("gcp", "jwt"): _connect_gcp_with_jwt,
    ("gcp", "auto"): _connect_gcp_with_auto,
}


def connect(options, node_matchers):
    """Opens an authenticated channel to options.service_uri.

    Args:
      options: The SessionOptions of the session.
      node_matchers: The NodeMatchers of the request. In "auto" mode on gcp
        the project number found in them is sent as the user project.

    Returns:
      A Connection.

    Raises:
      UnsupportedAuthError: If the (platform, authn_mode) pair is not
        supported. Raised before any network activity.
      MissingInputError: If "jwt" mode is used without a jwt_file.
      CredentialsError: If the credentials of the mode cannot be loaded.
    """
    connector = _CONNECTORS.get((options.platform, options.authn_mode))
    if connector is None:
        supported_modes = [
            mode
            for platform, mode in _CONNECTORS
            if platform == options.platform
        ]
        raise _errors.UnsupportedAuthError(
            f"{options.authn_mode} authentication mode is not supported for"
            f" platform {options.platform}, supported modes:"
            f" {', '.join(supported_modes)}"
        )
    return connector(options, node_matchers)
