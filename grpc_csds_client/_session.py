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
"""Drives the StreamClientStatus session against a CSDS server.

A session connects once, opens one bidirectional stream and then performs
request/response exchanges on it, printing a report after each. A stream
rejected by the server's RpcSecurityPolicy is replaced by a new stream on the
same channel and the exchange is retried.
"""

import dataclasses
import enum
import logging
import threading
from typing import Any, Optional, Tuple

from envoy.service.status.v3 import csds_pb2
from envoy.service.status.v3 import csds_pb2_grpc
from google.rpc import error_details_pb2
import grpc
from grpc_status import rpc_status

from grpc_csds_client import _auth
from grpc_csds_client import _errors
from grpc_csds_client import _report

_LOGGER = logging.getLogger(__name__)

# Found in the status of streams rejected by the security policy of
# Traffic Director, which happens e.g. when a stream outlives its credentials.
_TRANSIENT_SIGNATURE = "RpcSecurityPolicy"


@enum.unique
class ErrorKind(enum.Enum):
    TRANSIENT = "transient"
    FATAL = "fatal"


def _rich_status(rpc_error):
    if not isinstance(rpc_error, grpc.Call):
        return None
    if rpc_error.trailing_metadata() is None:
        return None
    try:
        return rpc_status.from_call(rpc_error)
    except ValueError as error:
        _LOGGER.debug("Ignoring inconsistent rich status: %s", error)
        return None


def _has_transient_signature(rich_status) -> bool:
    if _TRANSIENT_SIGNATURE in rich_status.message:
        return True
    for detail in rich_status.details:
        if detail.Is(error_details_pb2.ErrorInfo.DESCRIPTOR):
            error_info = error_details_pb2.ErrorInfo()
            detail.Unpack(error_info)
            if _TRANSIENT_SIGNATURE in error_info.reason:
                return True
    return False


def _description(rpc_error) -> str:
    if isinstance(rpc_error, grpc.Call):
        return f"{rpc_error.details()} {rpc_error}"
    return str(rpc_error)


def classify(rpc_error) -> ErrorKind:
    """Decides whether a failed exchange may be retried on a new stream.

    The google.rpc.Status attached to the error is inspected first. When the
    server attaches none, the error text is searched for the security policy
    signature instead. That fallback depends on the wording of the server's
    error and is a known limitation.

    Args:
      rpc_error: The grpc.RpcError raised by the stream.

    Returns:
      ErrorKind.TRANSIENT for a security policy rejection, else
      ErrorKind.FATAL.
    """
    rich_status = _rich_status(rpc_error)
    if rich_status is not None and _has_transient_signature(rich_status):
        return ErrorKind.TRANSIENT
    if _TRANSIENT_SIGNATURE in _description(rpc_error):
        return ErrorKind.TRANSIENT
    return ErrorKind.FATAL


class _Pipe(object):
    """A blocking request iterator fed one request at a time."""

    def __init__(self):
        self._condition = threading.Condition()
        self._values = []
        self._open = True

    def __iter__(self):
        return self

    def __next__(self):
        with self._condition:
            while not self._values and self._open:
                self._condition.wait()
            if self._values:
                return self._values.pop(0)
            else:
                raise StopIteration()

    def add(self, value):
        with self._condition:
            self._values.append(value)
            self._condition.notify()

    def close(self):
        with self._condition:
            self._open = False
            self._condition.notify()


class _Stream(object):
    """One StreamClientStatus call."""

    def __init__(self, stub, metadata):
        self._requests = _Pipe()
        self._responses = stub.StreamClientStatus(
            self._requests, metadata=metadata or None
        )
        self._ended = False

    def exchange(
        self, request: csds_pb2.ClientStatusRequest
    ) -> Optional[csds_pb2.ClientStatusResponse]:
        """Sends a request and waits for its response.

        Returns:
          The response, or None if the server ended the stream.

        Raises:
          TransientProtocolError: If the stream was rejected by the security
            policy.
          FatalProtocolError: If the stream failed otherwise, or if the server
            had already ended it.
        """
        if self._ended:
            raise _errors.FatalProtocolError()
        self._requests.add(request)
        try:
            return next(self._responses)
        except StopIteration:
            self._ended = True
            return None
        except grpc.RpcError as rpc_error:
            if classify(rpc_error) is ErrorKind.TRANSIENT:
                raise _errors.TransientProtocolError(rpc_error) from rpc_error
            raise _errors.FatalProtocolError(rpc_error) from rpc_error

    def close_send(self):
        self._requests.close()

    def discard(self):
        self._requests.close()
        self._responses.cancel()


@dataclasses.dataclass(frozen=True)
class _SessionState:
    stub: Any
    metadata: Tuple[Tuple[str, str], ...]
    stream: _Stream


def _open_session(channel, metadata) -> _SessionState:
    stub = csds_pb2_grpc.ClientStatusDiscoveryServiceStub(channel)
    return _SessionState(
        stub=stub, metadata=metadata, stream=_Stream(stub, metadata)
    )


def _reopen(state: _SessionState) -> _SessionState:
    state.stream.discard()
    return dataclasses.replace(
        state, stream=_Stream(state.stub, state.metadata)
    )


def run(options, selection, connect=None, out=None, stop_event=None):
    """Runs a session, once or until stopped.

    Args:
      options: The SessionOptions.
      selection: The NodeSelection to request statuses for.
      connect: Called as connect(options, node_matchers) and returns an
        _auth.Connection. Defaults to _auth.connect.
      out: The text stream reports are printed to. Defaults to sys.stdout.
      stop_event: A threading.Event that ends monitor mode when set.

    Raises:
      ConfigurationError: If the session cannot be authenticated.
      FatalProtocolError: If an exchange fails for a reason other than the
        security policy, or if monitor mode goes on after the server ended
        the stream.
      RenderError: If a response cannot be reported.
    """
    if connect is None:
        connect = _auth.connect
    if stop_event is None:
        stop_event = threading.Event()

    connection = connect(options, selection.node_matchers)
    state = None
    try:
        state = _open_session(connection.channel, tuple(connection.metadata))
        request = selection.to_request()
        while True:
            _LOGGER.debug("Sending request for node %r", selection.node.id)
            try:
                response = state.stream.exchange(request)
            except _errors.TransientProtocolError as error:
                _LOGGER.warning("Reopening the stream: %s", error)
                state = _reopen(state)
                continue
            _report.print_response(response, options, out)
            if not options.monitor_interval:
                break
            if stop_event.wait(options.monitor_interval):
                _LOGGER.info("Monitoring stopped")
                break
    finally:
        if state is not None:
            state.stream.close_send()
        connection.channel.close()
