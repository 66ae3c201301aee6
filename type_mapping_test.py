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
"""Tests the mapping of protobuf types to Solidity types and wire types."""

import unittest

from google.protobuf import descriptor_pb2
from parameterized import parameterized  # type: ignore

from protobuf3_solidity.errors import UnsupportedFieldTypeError
from protobuf3_solidity.proto_tree import (
    EnumKind,
    MessageKind,
    ProtoMessageField,
    ScalarKind,
)
from protobuf3_solidity.type_mapping import (
    WireType,
    decoder_function,
    field_type_name,
    type_label,
    type_to_native,
    wire_type_of,
)

_FD = descriptor_pb2.FieldDescriptorProto


def _scalar(proto_type: int, repeated: bool = False) -> ProtoMessageField:
    return ProtoMessageField(
        'value', 1, ScalarKind(proto_type), repeated=repeated, packed=repeated
    )


class TypeToNativeTest(unittest.TestCase):
    """Tests type_to_native."""

    @parameterized.expand(
        [
            (_FD.TYPE_INT32, 'int32'),
            (_FD.TYPE_INT64, 'int64'),
            (_FD.TYPE_UINT32, 'uint32'),
            (_FD.TYPE_UINT64, 'uint64'),
            (_FD.TYPE_SINT32, 'int32'),
            (_FD.TYPE_SINT64, 'int64'),
            (_FD.TYPE_FIXED32, 'uint32'),
            (_FD.TYPE_FIXED64, 'uint64'),
            (_FD.TYPE_SFIXED32, 'int32'),
            (_FD.TYPE_SFIXED64, 'int64'),
            (_FD.TYPE_BOOL, 'bool'),
            (_FD.TYPE_STRING, 'string'),
            (_FD.TYPE_BYTES, 'bytes'),
        ]
    )
    def test_scalar(self, proto_type, native):
        self.assertEqual(type_to_native(proto_type), native)

    @parameterized.expand(
        [
            ('enum', _FD.TYPE_ENUM),
            ('message', _FD.TYPE_MESSAGE),
            ('float', _FD.TYPE_FLOAT),
            ('double', _FD.TYPE_DOUBLE),
            ('group', _FD.TYPE_GROUP),
        ]
    )
    def test_unsupported(self, _, proto_type):
        with self.assertRaises(UnsupportedFieldTypeError):
            type_to_native(proto_type)

    def test_type_label(self):
        self.assertEqual(type_label(_FD.TYPE_SFIXED32), 'sfixed32')

    def test_decoder_function_uses_wire_encoding(self):
        self.assertEqual(
            decoder_function(_FD.TYPE_SINT64), 'ProtobufLib.decode_sint64'
        )
        self.assertEqual(
            decoder_function(_FD.TYPE_FIXED32), 'ProtobufLib.decode_fixed32'
        )


class WireTypeTest(unittest.TestCase):
    """Tests wire_type_of."""

    @parameterized.expand(
        [
            (_FD.TYPE_INT32, WireType.VARINT),
            (_FD.TYPE_UINT64, WireType.VARINT),
            (_FD.TYPE_SINT32, WireType.VARINT),
            (_FD.TYPE_BOOL, WireType.VARINT),
            (_FD.TYPE_FIXED32, WireType.BITS32),
            (_FD.TYPE_SFIXED32, WireType.BITS32),
            (_FD.TYPE_FIXED64, WireType.BITS64),
            (_FD.TYPE_SFIXED64, WireType.BITS64),
            (_FD.TYPE_STRING, WireType.LENGTH_DELIMITED),
            (_FD.TYPE_BYTES, WireType.LENGTH_DELIMITED),
        ]
    )
    def test_scalar(self, proto_type, wire_type):
        self.assertIs(wire_type_of(_scalar(proto_type)), wire_type)

    def test_enum_is_varint(self):
        field = ProtoMessageField('color', 1, EnumKind('Color'))
        self.assertIs(wire_type_of(field), WireType.VARINT)

    def test_message_is_length_delimited(self):
        field = ProtoMessageField('other', 1, MessageKind('Other'))
        self.assertIs(wire_type_of(field), WireType.LENGTH_DELIMITED)

    @parameterized.expand(
        [
            ('varint', _FD.TYPE_UINT32),
            ('bits32', _FD.TYPE_FIXED32),
            ('bits64', _FD.TYPE_SFIXED64),
        ]
    )
    def test_repeated_is_length_delimited(self, _, proto_type):
        field = _scalar(proto_type, repeated=True)
        self.assertIs(wire_type_of(field), WireType.LENGTH_DELIMITED)

    def test_sol_name(self):
        self.assertEqual(
            WireType.BITS32.sol_name(), 'ProtobufLib.WireType.Bits32'
        )


class FieldTypeNameTest(unittest.TestCase):
    """Tests field_type_name."""

    def test_scalar(self):
        self.assertEqual(field_type_name(_scalar(_FD.TYPE_FIXED64)), 'uint64')

    def test_enum_and_message_use_type_name(self):
        self.assertEqual(
            field_type_name(ProtoMessageField('c', 1, EnumKind('Color'))),
            'Color',
        )
        self.assertEqual(
            field_type_name(ProtoMessageField('o', 1, MessageKind('Other'))),
            'Other',
        )


if __name__ == '__main__':
    unittest.main()
