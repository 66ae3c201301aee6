#!/usr/bin/env python3
# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""protoc-gen-sol compiler plugin.

This file implements a protobuf compiler plugin which generates Solidity
structs and decoder libraries for proto3 messages.
"""

from argparse import ArgumentParser, Namespace
import logging
from shlex import shlex
import sys

from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from protobuf3_solidity import codegen_sol, log
from protobuf3_solidity.errors import SchemaError

_LOG = logging.getLogger(__name__)


class ParameterError(Exception):
    """The parameter string passed through from protoc is invalid."""


class _ParameterParser(ArgumentParser):
    """ArgumentParser which raises instead of exiting the plugin process."""

    def error(self, message: str):
        raise ParameterError(message)


def parse_parameter_options(parameter: str) -> Namespace:
    """Parses parameters passed through from protoc.

    These parameters come in via passing `--sol_opt` parameters to protoc,
    e.g. `--sol_opt=--license=MIT,--solidity-version='>=0.6.0 <0.8.0'`.
    """
    parser = _ParameterParser(prog='protoc-gen-sol', add_help=False)
    parser.add_argument(
        '--license',
        default=codegen_sol.DEFAULT_LICENSE,
        help='SPDX license identifier written at the top of generated files',
    )
    parser.add_argument(
        '--solidity-version',
        dest='solidity_version',
        default=codegen_sol.DEFAULT_SOLIDITY_VERSION,
        help='Version range of the generated "pragma solidity" line',
    )
    parser.add_argument(
        '--protobuf-lib',
        dest='protobuf_lib',
        default=codegen_sol.DEFAULT_PROTOBUF_LIB,
        help='Import path of the ProtobufLib wire format library',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log debug messages to stderr',
    )

    # protoc passes the custom arguments in shell quoted form, separated by
    # commas. Use shlex to split them, correctly handling quoted sections, with
    # equivalent options to IFS=","
    lex = shlex(parameter, posix=True)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''
    try:
        args = list(lex)
    except ValueError as err:
        raise ParameterError(str(err)) from err

    return parser.parse_args(args)


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. If generation fails, the response
    only holds the error message.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
    """
    try:
        args = parse_parameter_options(req.parameter)
    except ParameterError as err:
        res.error = f'protoc-gen-sol: invalid parameter: {err}'
        return False

    if args.verbose:
        log.set_level(logging.DEBUG)

    options = codegen_sol.GeneratorOptions(
        license=args.license,
        solidity_version=args.solidity_version,
        protobuf_lib=args.protobuf_lib,
    )

    try:
        output_files = codegen_sol.process_proto_files(req.proto_file, options)
    except SchemaError as err:
        res.error = err.formatted_message()
        return False

    for output_file in output_files:
        fd = res.file.add()
        fd.name = output_file.name()
        fd.content = output_file.content()

    return True


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout. Errors are reported through the
    response, which protoc shows to the user.
    """
    log.install()

    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3, so protoc
    # passes them through and the plugin reports them itself.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    data = sys.stdin.buffer.read()
    try:
        request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    except DecodeError as err:
        response.error = f'protoc-gen-sol: invalid request: {err}'
        _LOG.error('protoc-gen-sol could not read the request: %s', err)
    else:
        if not process_proto_request(request, response):
            _LOG.error('protoc-gen-sol failed to generate Solidity code')

    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == '__main__':
    sys.exit(main())
