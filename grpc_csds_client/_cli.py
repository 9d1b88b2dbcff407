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
"""Command line interface of the CSDS client."""

import argparse
import logging
import os
import sys

from grpc_csds_client import _errors
from grpc_csds_client import _matcher
from grpc_csds_client import _options
from grpc_csds_client import _session

_LOGGER = logging.getLogger("grpc_csds_client")
_LOG_FORMAT = "%(asctime)s: %(levelname)-8s %(message)s"


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        description=(
            "Print the xDS config status of the clients connected to a"
            " control plane."
        )
    )
    parser.add_argument(
        "--service_uri",
        default=_options.DEFAULT_SERVICE_URI,
        type=str,
        help="the address of the CSDS server",
    )
    parser.add_argument(
        "--platform",
        default="gcp",
        type=str,
        help="the control plane platform, one of: "
        + ", ".join(_options.SUPPORTED_PLATFORMS),
    )
    parser.add_argument(
        "--authn_mode",
        default="auto",
        type=str,
        help="the authentication mode, one of: "
        + ", ".join(_options.SUPPORTED_AUTHN_MODES),
    )
    parser.add_argument(
        "--request_file",
        default="",
        type=str,
        help="a YAML file holding the node_matchers and node of the request",
    )
    parser.add_argument(
        "--request_yaml",
        default="",
        type=str,
        help=(
            "an inline YAML request, merged on top of the one loaded from"
            " --request_file"
        ),
    )
    parser.add_argument(
        "--jwt_file",
        default="",
        type=str,
        help="a service account key file, used when --authn_mode=jwt",
    )
    parser.add_argument(
        "--file_to_save_config",
        default="",
        type=str,
        help="save the detailed config to this file instead of printing it",
    )
    parser.add_argument(
        "--monitor_interval",
        default=0.0,
        type=float,
        help="seconds between two requests, 0 sends a single request",
    )
    parser.add_argument(
        "--filter_mode",
        default="prefix",
        type=str,
        help="how --filter_pattern is matched, one of: "
        + ", ".join(_options.SUPPORTED_FILTER_MODES),
    )
    parser.add_argument(
        "--filter_pattern",
        default="",
        type=str,
        help="only report clients whose id matches this pattern",
    )
    parser.add_argument(
        "--verbose",
        help="verbose log output",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log_file", default=None, type=str, help="a file to log to"
    )
    return parser.parse_args(argv)


def _configure_logging(args):
    formatter = logging.Formatter(fmt=_LOG_FORMAT)
    if not any(
        type(handler) is logging.StreamHandler for handler in _LOGGER.handlers
    ):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        _LOGGER.addHandler(console_handler)
    # The path of a saved config is logged at INFO.
    _LOGGER.setLevel(logging.DEBUG if args.verbose else logging.INFO)
    if args.log_file:
        log_file = os.path.abspath(args.log_file)
        if not any(
            isinstance(handler, logging.FileHandler)
            and handler.baseFilename == log_file
            for handler in _LOGGER.handlers
        ):
            file_handler = logging.FileHandler(log_file, mode="a")
            file_handler.setFormatter(formatter)
            _LOGGER.addHandler(file_handler)


def main(argv=None, stop_event=None) -> int:
    """Runs the client.

    Returns:
      The process exit code.
    """
    args = _parse_args(argv)
    _configure_logging(args)
    try:
        options = _options.SessionOptions(
            service_uri=args.service_uri,
            platform=args.platform,
            authn_mode=args.authn_mode,
            request_file=args.request_file,
            request_yaml=args.request_yaml,
            jwt_file=args.jwt_file,
            config_file=args.file_to_save_config,
            monitor_interval=args.monitor_interval,
            filter_mode=args.filter_mode,
            filter_pattern=args.filter_pattern,
        )
        selection = _matcher.from_options(options)
        _session.run(options, selection, stop_event=stop_event)
    except _errors.Error as error:
        _LOGGER.debug("Session failed", exc_info=True)
        sys.stderr.write(f"error: {error}\n")
        return 1
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted")
    return 0
