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
"""This module defines the generated Solidity code for proto3 files.

Each .proto file produces one .sol file holding an enum per proto enum, and a
struct plus a ``<Message>Codec`` library per proto message. The codec decodes
the protobuf wire format with stricter rules than protobuf itself: fields must
appear in increasing field number order, at most once (repeated fields
excepted), and with no unknown fields.
"""

from dataclasses import dataclass
import logging
import os
import posixpath

from protobuf3_solidity import validation
from protobuf3_solidity.decoders import field_decoder, fail_if
from protobuf3_solidity.errors import EnumOrdinalSequenceError
from protobuf3_solidity.output_file import OutputFile
from protobuf3_solidity.proto_tree import ProtoEnum, ProtoFile, ProtoMessage
from protobuf3_solidity.proto_tree import build_file
from protobuf3_solidity.symbol_table import SymbolTable
from protobuf3_solidity.type_mapping import (
    PROTOBUF_LIB,
    field_type_name,
    wire_type_of,
)

_LOG = logging.getLogger(__name__)

PLUGIN_NAME = 'protoc-gen-sol'
PLUGIN_VERSION = '0.1.0'

SOL_EXTENSION = '.sol'

DEFAULT_LICENSE = 'CC0-1.0'
DEFAULT_SOLIDITY_VERSION = '>=0.6.0 <8.0.0'
DEFAULT_PROTOBUF_LIB = (
    '@lazyledger/protobuf3-solidity-lib/contracts/ProtobufLib.sol'
)


@dataclass
class GeneratorOptions:
    license: str = DEFAULT_LICENSE
    solidity_version: str = DEFAULT_SOLIDITY_VERSION
    protobuf_lib: str = DEFAULT_PROTOBUF_LIB


def _write_function(
    output: OutputFile,
    signature: str,
    body: list[str],
) -> None:
    output.write_line(f'{signature} {{')
    with output.indent():
        output.write_lines(body)
    output.write_line('}')


def emit_enum(
    proto_enum: ProtoEnum,
    output: OutputFile,
    symbols: SymbolTable,
) -> None:
    """Creates a Solidity enum for a proto enum.

    Solidity enums are numbered by position, so the proto values must be
    numbered 0, 1, 2, ... in declaration order. The enum's max ordinal is
    recorded in the symbol table for the range checks of message decoders.
    """
    values = proto_enum.values()
    if not values:
        raise EnumOrdinalSequenceError(
            'enums must have at least one value', proto_enum.location()
        )

    for expected, (value_name, number) in enumerate(values):
        if number != expected:
            raise EnumOrdinalSequenceError(
                f'value {value_name} is numbered {number}, expected '
                f'{expected}; enum values must be numbered 0..N in order',
                proto_enum.location(),
            )

    output.write_line(f'enum {proto_enum.name()} {{')
    with output.indent():
        for i, (value_name, _) in enumerate(values):
            separator = ',' if i < len(values) - 1 else ''
            output.write_line(f'{value_name}{separator}')
    output.write_line('}')

    symbols.add_enum(proto_enum.qualified_name(), proto_enum.max_ordinal())


def emit_struct(message: ProtoMessage, output: OutputFile) -> None:
    """Creates a Solidity struct holding the fields of a message."""
    output.write_line(f'struct {message.name()} {{')
    with output.indent():
        for field in message.fields():
            array = '[]' if field.is_repeated() else ''
            output.write_line(
                f'{field_type_name(field)}{array} {field.name()};'
            )
    output.write_line('}')


def _decode_body(message: ProtoMessage) -> list[str]:
    """Body of the top-level decode function of a message."""
    name = message.name()

    def fail(condition: str) -> list[str]:
        return fail_if(condition, 'pos', 'instance')

    lines = [
        f'{name} memory instance;',
        'uint64 previous_field_number = 0;',
        'uint64 pos = initial_pos;',
        '',
        '// Sanity checks',
    ]
    lines += fail('len > ~uint64(0) - pos')
    lines += [
        '',
        'while (pos - initial_pos < len) {',
        '    // Decode the key (field number and wire type)',
        '    bool success;',
        '    uint64 field_number;',
        f'    {PROTOBUF_LIB}.WireType wire_type;',
        '    (success, pos, field_number, wire_type) = '
        f'{PROTOBUF_LIB}.decode_key(pos, buf);',
    ]
    body = fail('!success')
    body.append('')
    body.append('// Check that the field number is within bounds')
    body += fail(f'field_number > {len(message.fields())}')
    body.append('')
    body.append('// Check that the field number is monotonically increasing')
    body += fail('field_number <= previous_field_number')
    body.append('')
    body.append('// Check that the wire type is correct')
    body.append('success = check_key(field_number, wire_type);')
    body += fail('!success')
    body.append('')
    body.append('// Actually decode the field')
    body.append(
        '(success, pos) = decode_field(pos, buf, initial_pos + len, '
        'field_number, instance);'
    )
    body += fail('!success')
    body.append('')
    body.append('previous_field_number = field_number;')
    lines += ['    ' + line if line else line for line in body]
    lines.append('}')
    lines.append('')
    lines.append('// Decoding must have consumed len bytes')
    lines += fail('pos != initial_pos + len')
    lines.append('')
    lines.append('return (true, pos, instance);')
    return lines


def _check_key_body(message: ProtoMessage) -> list[str]:
    lines: list[str] = []
    for field in message.fields():
        lines.append(f'if (field_number == {field.number()}) {{')
        lines.append(
            f'    return wire_type == {wire_type_of(field).sol_name()};'
        )
        lines.append('}')
        lines.append('')
    lines.append('return false;')
    return lines


def _decode_field_body(message: ProtoMessage) -> list[str]:
    lines: list[str] = []
    for field in message.fields():
        number = field.number()
        lines.append(f'if (field_number == {number}) {{')
        lines.append(
            f'    return decode_{number}(pos, buf, end_pos, instance);'
        )
        lines.append('}')
        lines.append('')
    lines.append('return (false, pos);')
    return lines


def emit_codec(
    message: ProtoMessage,
    output: OutputFile,
    symbols: SymbolTable,
) -> None:
    """Creates the Solidity codec library of a message."""
    name = message.name()

    output.write_line(f'library {message.codec_name()} {{')
    with output.indent():
        _write_function(
            output,
            'function decode(uint64 initial_pos, bytes memory buf, '
            f'uint64 len) internal pure returns (bool, uint64, {name} memory)',
            _decode_body(message),
        )
        output.write_line()
        _write_function(
            output,
            'function check_key(uint64 field_number, '
            f'{PROTOBUF_LIB}.WireType wire_type) internal pure returns (bool)',
            _check_key_body(message),
        )
        output.write_line()
        _write_function(
            output,
            'function decode_field(uint64 pos, bytes memory buf, '
            f'uint64 end_pos, uint64 field_number, {name} memory instance) '
            'internal pure returns (bool, uint64)',
            _decode_field_body(message),
        )

        for field in message.fields():
            decoder = field_decoder(field, message, symbols)
            output.write_line()
            _write_function(
                output,
                f'function {decoder.name()}({decoder.param_string()}) '
                'internal pure returns (bool, uint64)',
                decoder.body(),
            )

        output.write_line()
        _write_function(
            output,
            f'function encode({name} memory) internal pure '
            'returns (bytes memory)',
            ['revert("Encoding not yet supported");'],
        )
    output.write_line('}')


def _relative_import(proto_file: ProtoFile, dependency: str) -> str:
    """Path of a dependency's generated file relative to proto_file's."""
    source_dir = posixpath.dirname(proto_file.name()) or '.'
    path = posixpath.relpath(_sol_filename(dependency), source_dir)
    if not path.startswith('.'):
        path = './' + path
    return path


def _sol_filename(proto_filename: str) -> str:
    """Returns the generated Solidity file name for a .proto file."""
    return os.path.splitext(proto_filename)[0] + SOL_EXTENSION


def generate_header(
    proto_file: ProtoFile,
    output: OutputFile,
    options: GeneratorOptions,
) -> None:
    """Writes the license, pragmas and imports of a generated file."""
    output.write_line(f'// SPDX-License-Identifier: {options.license}')
    output.write_line(f'pragma solidity {options.solidity_version};')
    output.write_line('pragma experimental ABIEncoderV2;')
    output.write_line()
    output.write_line(f'import "{options.protobuf_lib}";')
    for dependency in proto_file.dependencies():
        path = _relative_import(proto_file, dependency)
        output.write_line(f'import "{path}";')


def generate_enums(
    proto_file: ProtoFile,
    output: OutputFile,
    symbols: SymbolTable,
) -> None:
    for proto_enum in proto_file.enums():
        output.write_line()
        emit_enum(proto_enum, output, symbols)


def generate_messages(
    proto_file: ProtoFile,
    output: OutputFile,
    symbols: SymbolTable,
) -> None:
    for message in proto_file.messages():
        output.write_line()
        emit_struct(message, output)
        output.write_line()
        emit_codec(message, output, symbols)


def process_proto_files(
    file_descriptor_protos,
    options: GeneratorOptions,
) -> list[OutputFile]:
    """Generates a Solidity file for each file descriptor.

    All files are validated before any code is generated, and every enum of
    every file is emitted before the first message, so message decoders can
    range check enums declared in any of the files.

    Raises:
      SchemaError: Any of the files is outside the supported subset of proto3.
    """
    files = [build_file(fd) for fd in file_descriptor_protos]
    validation.validate_request(files)

    symbols = SymbolTable()
    outputs = [OutputFile(_sol_filename(f.name())) for f in files]

    for proto_file, output in zip(files, outputs):
        generate_header(proto_file, output, options)
        generate_enums(proto_file, output, symbols)

    _LOG.debug('Collected %d enums', len(symbols))

    for proto_file, output in zip(files, outputs):
        generate_messages(proto_file, output, symbols)
        _LOG.debug('Generated %s', output.name())

    return outputs
