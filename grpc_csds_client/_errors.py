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
"""Exceptions raised by the CSDS client."""


class Error(Exception):
    """Base class for every error raised by the CSDS client."""


class ConfigurationError(Error):
    """Bad or missing input, detected before any network I/O."""


class MissingInputError(ConfigurationError):
    pass


class InvalidDocumentError(ConfigurationError):
    pass


class MissingRequiredFieldError(ConfigurationError):
    pass


class ConflictingFieldError(ConfigurationError):
    pass


class UnsupportedOptionError(ConfigurationError):
    pass


class UnsupportedAuthError(ConfigurationError):
    pass


class CredentialsError(ConfigurationError):
    """The credentials of the authentication mode could not be loaded."""


class ProtocolError(Error):
    """A failed StreamClientStatus exchange.

    Attributes:
      rpc_error: The grpc.RpcError raised by the stream, or None if the
        server had already ended the stream.
    """

    def __init__(self, rpc_error=None):
        super().__init__(_describe(rpc_error))
        self.rpc_error = rpc_error


class TransientProtocolError(ProtocolError):
    """The stream was rejected by the security policy and may be reopened."""


class FatalProtocolError(ProtocolError):
    pass


class RenderError(Error):
    """A response could not be turned into a report."""


class UnsupportedConfigTypeError(RenderError):
    pass


class InvalidPatternError(RenderError):
    pass


def _describe(rpc_error):
    if rpc_error is None:
        return "StreamClientStatus was already ended by the server"
    code = getattr(rpc_error, "code", None)
    details = getattr(rpc_error, "details", None)
    if callable(code) and callable(details):
        return f"StreamClientStatus failed with {code()}: {details()}"
    return f"StreamClientStatus failed: {rpc_error}"
