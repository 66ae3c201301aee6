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
"""Maps protobuf field types onto Solidity types and wire types."""

import enum

from google.protobuf import descriptor_pb2

from protobuf3_solidity.errors import UnsupportedFieldTypeError
from protobuf3_solidity.proto_tree import (
    EnumKind,
    MessageKind,
    ProtoMessageField,
    ScalarKind,
)

_FieldDescriptor = descriptor_pb2.FieldDescriptorProto

PROTOBUF_LIB = 'ProtobufLib'


class WireType(enum.Enum):
    """Wire types, named as ProtobufLib.WireType names them."""

    VARINT = 'Varint'
    BITS64 = 'Bits64'
    LENGTH_DELIMITED = 'LengthDelimited'
    BITS32 = 'Bits32'

    def sol_name(self) -> str:
        return f'{PROTOBUF_LIB}.WireType.{self.value}'


# (Solidity type, ProtobufLib decoder suffix) for each scalar type.
_SCALAR_TYPES: dict[int, tuple[str, str]] = {
    _FieldDescriptor.TYPE_INT32: ('int32', 'int32'),
    _FieldDescriptor.TYPE_INT64: ('int64', 'int64'),
    _FieldDescriptor.TYPE_UINT32: ('uint32', 'uint32'),
    _FieldDescriptor.TYPE_UINT64: ('uint64', 'uint64'),
    _FieldDescriptor.TYPE_SINT32: ('int32', 'sint32'),
    _FieldDescriptor.TYPE_SINT64: ('int64', 'sint64'),
    _FieldDescriptor.TYPE_FIXED32: ('uint32', 'fixed32'),
    _FieldDescriptor.TYPE_FIXED64: ('uint64', 'fixed64'),
    _FieldDescriptor.TYPE_SFIXED32: ('int32', 'sfixed32'),
    _FieldDescriptor.TYPE_SFIXED64: ('int64', 'sfixed64'),
    _FieldDescriptor.TYPE_BOOL: ('bool', 'bool'),
    _FieldDescriptor.TYPE_STRING: ('string', 'string'),
    _FieldDescriptor.TYPE_BYTES: ('bytes', 'bytes'),
}

_BITS32_TYPES = frozenset(
    [_FieldDescriptor.TYPE_FIXED32, _FieldDescriptor.TYPE_SFIXED32]
)
_BITS64_TYPES = frozenset(
    [_FieldDescriptor.TYPE_FIXED64, _FieldDescriptor.TYPE_SFIXED64]
)
_LENGTH_DELIMITED_TYPES = frozenset(
    [_FieldDescriptor.TYPE_STRING, _FieldDescriptor.TYPE_BYTES]
)


def type_label(proto_type: int) -> str:
    """Returns the .proto spelling of a field type, e.g. 'sfixed32'."""
    return _FieldDescriptor.Type.Name(proto_type)[len('TYPE_') :].lower()


def is_length_delimited_scalar(proto_type: int) -> bool:
    """True for string and bytes."""
    return proto_type in _LENGTH_DELIMITED_TYPES


def type_to_native(proto_type: int) -> str:
    """Returns the Solidity type for a scalar protobuf type.

    Raises:
      UnsupportedFieldTypeError: The type is not one of the twelve supported
          scalar types. Enum and message types are resolved by name instead.
    """
    try:
        return _SCALAR_TYPES[proto_type][0]
    except KeyError:
        raise UnsupportedFieldTypeError(
            f'no Solidity type for protobuf type {type_label(proto_type)}',
            type_label(proto_type),
        ) from None


def decoder_function(proto_type: int) -> str:
    """Returns the ProtobufLib primitive decoding a scalar protobuf type."""
    type_to_native(proto_type)
    return f'{PROTOBUF_LIB}.decode_{_SCALAR_TYPES[proto_type][1]}'


def field_type_name(field: ProtoMessageField) -> str:
    """The Solidity type of a single element of the field."""
    match field.kind():
        case ScalarKind(proto_type):
            return type_to_native(proto_type)
        case EnumKind(ref) | MessageKind(ref):
            return ref


def wire_type_of(field: ProtoMessageField) -> WireType:
    """Returns the wire type expected in the key of a field.

    Repeated fields are always length-delimited: packed fields are wrapped in
    one length-delimited run, and the only unpacked repeated fields allowed
    are messages.
    """
    if field.is_repeated():
        return WireType.LENGTH_DELIMITED
    return element_wire_type(field)


def element_wire_type(field: ProtoMessageField) -> WireType:
    """Returns the wire type of a single element of the field."""
    match field.kind():
        case ScalarKind(proto_type) if proto_type in _BITS32_TYPES:
            return WireType.BITS32
        case ScalarKind(proto_type) if proto_type in _BITS64_TYPES:
            return WireType.BITS64
        case ScalarKind(proto_type) if proto_type in _LENGTH_DELIMITED_TYPES:
            return WireType.LENGTH_DELIMITED
        case ScalarKind(proto_type):
            type_to_native(proto_type)
            return WireType.VARINT
        case EnumKind():
            return WireType.VARINT
        case MessageKind():
            return WireType.LENGTH_DELIMITED
