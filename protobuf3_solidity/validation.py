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
"""Structural checks run on .proto files before any code is generated.

The generated decoders only handle a restricted subset of proto3: top-level
enums and messages, fields numbered 1..N, packed numeric repeated fields and
unpacked repeated messages. Each check raises the first violation it finds.
"""

from graphlib import CycleError, TopologicalSorter
import logging

from protobuf3_solidity import errors
from protobuf3_solidity.proto_tree import (
    EnumKind,
    MessageKind,
    ProtoFile,
    ProtoMessage,
    ProtoMessageField,
    ScalarKind,
)
from protobuf3_solidity.type_mapping import (
    PROTOBUF_LIB,
    is_length_delimited_scalar,
    type_to_native,
)

_LOG = logging.getLogger(__name__)

PROTO3 = 'proto3'

# Keywords, reserved words and built-in names of Solidity which cannot be used
# as identifiers in the generated source.
SOLIDITY_RESERVED_WORDS = frozenset(
    '''
    abstract after alias anonymous apply as assembly auto bool break byte
    bytes calldata case catch constant constructor continue contract copyof
    default define delete do else emit enum event external fallback false
    final for function gwei hex if immutable implements import in indexed
    inline interface internal is let library macro mapping match memory
    modifier mutable new null of override partial payable pragma private
    promise public pure receive reference relocatable return returns sealed
    sizeof static storage string struct supports switch this throw true try
    type typedef typeof unchecked using var view virtual while
    address int uint fixed ufixed wei ether seconds minutes hours days weeks
    years finney szabo block msg tx abi now super selfdestruct suicide
    sha3 sha256 keccak256 ripemd160 ecrecover addmod mulmod assert require
    revert gasleft blockhash unicode
    '''.split()
    + [f'int{bits}' for bits in range(8, 257, 8)]
    + [f'uint{bits}' for bits in range(8, 257, 8)]
    + [f'bytes{size}' for size in range(1, 33)]
    + [
        f'{prefix}{bits}x{decimals}'
        for prefix in ('fixed', 'ufixed')
        for bits in range(8, 257, 8)
        for decimals in range(81)
    ]
)


def _check_identifier(name: str, path: str, field: str | None = None) -> None:
    if name in SOLIDITY_RESERVED_WORDS:
        raise errors.KeywordCollisionError(
            f'"{name}" is a reserved word in Solidity', path, field
        )


def _check_keywords(proto_file: ProtoFile) -> None:
    for proto_enum in proto_file.enums():
        _check_identifier(proto_enum.name(), proto_enum.location())
        for value_name, _ in proto_enum.values():
            _check_identifier(value_name, proto_enum.location())

    for message in proto_file.messages():
        _check_identifier(message.name(), message.location())
        for field in message.fields():
            _check_identifier(field.name(), message.location(), field.name())


def _check_field_numbers(message: ProtoMessage) -> None:
    for expected, field in enumerate(message.fields(), start=1):
        if field.number() != expected:
            raise errors.FieldNumberingError(
                f'field numbered {field.number()}, expected {expected}; '
                'fields must be numbered 1..N in declaration order',
                message.location(),
                field.name(),
            )


def _check_repeated(message: ProtoMessage, field: ProtoMessageField) -> None:
    if not field.is_repeated():
        return

    match field.kind():
        case ScalarKind(proto_type) if is_length_delimited_scalar(proto_type):
            if field.is_packed():
                raise errors.PackingForbiddenError(
                    'repeated string and bytes fields cannot be packed',
                    message.location(),
                    field.name(),
                )
            raise errors.UnsupportedRepeatedTypeError(
                'repeated string and bytes fields are not supported',
                message.location(),
                field.name(),
            )
        case ScalarKind() | EnumKind():
            if not field.is_packed():
                raise errors.PackingRequiredError(
                    'repeated numeric and enum fields must be declared '
                    '[packed = true]',
                    message.location(),
                    field.name(),
                )
        case MessageKind():
            if field.is_packed():
                raise errors.PackingForbiddenError(
                    'repeated message fields cannot be packed',
                    message.location(),
                    field.name(),
                )


def _check_field_type(message: ProtoMessage, field: ProtoMessageField) -> None:
    match field.kind():
        case ScalarKind(proto_type):
            try:
                type_to_native(proto_type)
            except errors.UnsupportedFieldTypeError as err:
                raise errors.UnsupportedFieldTypeError(
                    err.error_message, message.location(), field.name()
                ) from None
        case EnumKind() | MessageKind():
            pass


def validate_file(proto_file: ProtoFile) -> None:
    """Checks a single file against the supported subset of proto3.

    Raises:
      SchemaError: The first violation found, in the order syntax, package,
          nested declarations, reserved words, field numbering, repeated field
          packing, field types and oneofs.
    """
    _LOG.debug('Validating %s', proto_file.name())

    if proto_file.syntax() != PROTO3:
        raise errors.SyntaxVersionError(
            f'syntax must be "{PROTO3}", found "{proto_file.syntax()}"',
            proto_file.name(),
        )

    if proto_file.package():
        raise errors.PackageForbiddenError(
            f'package declarations are not supported '
            f'(package {proto_file.package()})',
            proto_file.name(),
        )

    for message in proto_file.messages():
        if message.nested_declarations():
            raise errors.NestedTypeForbiddenError(
                'nested message, enum and map declarations are not supported',
                message.location(),
            )

    _check_keywords(proto_file)

    for message in proto_file.messages():
        if not message.fields():
            raise errors.EmptyMessageError(
                'messages must have at least one field', message.location()
            )
        _check_field_numbers(message)

    for message in proto_file.messages():
        for field in message.fields():
            _check_repeated(message, field)

    for message in proto_file.messages():
        for field in message.fields():
            _check_field_type(message, field)
            if field.in_oneof():
                raise errors.OneofForbiddenError(
                    'oneof and optional fields are not supported',
                    message.location(),
                    field.name(),
                )


def _check_generated_names(files: list[ProtoFile]) -> None:
    """Rejects type names that clash with names the generated code declares."""
    codecs = {m.codec_name(): m for f in files for m in f.messages()}

    for proto_file in files:
        for node in [*proto_file.enums(), *proto_file.messages()]:
            name = node.name()
            if name == PROTOBUF_LIB:
                raise errors.KeywordCollisionError(
                    f'"{name}" collides with the imported wire format library',
                    node.location(),
                )
            if name in codecs:
                raise errors.KeywordCollisionError(
                    f'"{name}" collides with the codec library generated for '
                    f'message {codecs[name].name()}',
                    node.location(),
                )


def _check_references(files: list[ProtoFile]) -> dict[str, ProtoMessage]:
    """Resolves every enum and message reference against the request."""
    enums = {e.qualified_name() for f in files for e in f.enums()}
    messages = {m.qualified_name(): m for f in files for m in f.messages()}

    for proto_file in files:
        for message in proto_file.messages():
            for field in message.fields():
                match field.kind():
                    case EnumKind(ref) if ref not in enums:
                        raise errors.UnknownTypeReferenceError(
                            f'enum {ref} is not declared in any input file',
                            message.location(),
                            field.name(),
                        )
                    case MessageKind(ref) if ref not in messages:
                        raise errors.UnknownTypeReferenceError(
                            f'message {ref} is not declared in any input '
                            'file',
                            message.location(),
                            field.name(),
                        )

    return messages


def _check_acyclic(messages: dict[str, ProtoMessage]) -> None:
    graph = {name: m.dependencies() for name, m in messages.items()}
    try:
        TopologicalSorter(graph).prepare()
    except CycleError as err:
        cycle = err.args[1]
        raise errors.CyclicReferenceError(
            'recursive message references are not supported: '
            + ' -> '.join(cycle),
            messages[cycle[0]].location(),
        ) from None


def validate_request(files: list[ProtoFile]) -> None:
    """Validates every file, then the names and references between them."""
    for proto_file in files:
        validate_file(proto_file)

    _check_generated_names(files)
    _check_acyclic(_check_references(files))
