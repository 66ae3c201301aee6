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
"""Tests the generated Solidity source files."""

import unittest

from google.protobuf import descriptor_pb2, text_format

from protobuf3_solidity import codegen_sol
from protobuf3_solidity.errors import (
    EnumOrdinalSequenceError,
    PackageForbiddenError,
)
from protobuf3_solidity.output_file import OutputFile
from protobuf3_solidity.proto_tree import ProtoEnum
from protobuf3_solidity.symbol_table import SymbolTable


def _parse(text: str) -> descriptor_pb2.FileDescriptorProto:
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


_VALUE_PROTO = '''
name: "value.proto"
syntax: "proto3"
message_type {
  name: "Value"
  field { name: "amount" number: 1 label: LABEL_OPTIONAL type: TYPE_UINT64 }
}
'''

# pylint: disable=line-too-long
_VALUE_SOL = '''\
// SPDX-License-Identifier: CC0-1.0
pragma solidity >=0.6.0 <8.0.0;
pragma experimental ABIEncoderV2;

import "@lazyledger/protobuf3-solidity-lib/contracts/ProtobufLib.sol";

struct Value {
    uint64 amount;
}

library ValueCodec {
    function decode(uint64 initial_pos, bytes memory buf, uint64 len) internal pure returns (bool, uint64, Value memory) {
        Value memory instance;
        uint64 previous_field_number = 0;
        uint64 pos = initial_pos;

        // Sanity checks
        if (len > ~uint64(0) - pos) {
            return (false, pos, instance);
        }

        while (pos - initial_pos < len) {
            // Decode the key (field number and wire type)
            bool success;
            uint64 field_number;
            ProtobufLib.WireType wire_type;
            (success, pos, field_number, wire_type) = ProtobufLib.decode_key(pos, buf);
            if (!success) {
                return (false, pos, instance);
            }

            // Check that the field number is within bounds
            if (field_number > 1) {
                return (false, pos, instance);
            }

            // Check that the field number is monotonically increasing
            if (field_number <= previous_field_number) {
                return (false, pos, instance);
            }

            // Check that the wire type is correct
            success = check_key(field_number, wire_type);
            if (!success) {
                return (false, pos, instance);
            }

            // Actually decode the field
            (success, pos) = decode_field(pos, buf, initial_pos + len, field_number, instance);
            if (!success) {
                return (false, pos, instance);
            }

            previous_field_number = field_number;
        }

        // Decoding must have consumed len bytes
        if (pos != initial_pos + len) {
            return (false, pos, instance);
        }

        return (true, pos, instance);
    }

    function check_key(uint64 field_number, ProtobufLib.WireType wire_type) internal pure returns (bool) {
        if (field_number == 1) {
            return wire_type == ProtobufLib.WireType.Varint;
        }

        return false;
    }

    function decode_field(uint64 pos, bytes memory buf, uint64 end_pos, uint64 field_number, Value memory instance) internal pure returns (bool, uint64) {
        if (field_number == 1) {
            return decode_1(pos, buf, end_pos, instance);
        }

        return (false, pos);
    }

    function decode_1(uint64 pos, bytes memory buf, uint64 end_pos, Value memory instance) internal pure returns (bool, uint64) {
        bool success;
        uint64 v;
        (success, pos, v) = ProtobufLib.decode_uint64(pos, buf);
        if (!success) {
            return (false, pos);
        }

        // Default values must not be encoded
        if (v == 0) {
            return (false, pos);
        }

        instance.amount = v;
        return (true, pos);
    }

    function encode(Value memory) internal pure returns (bytes memory) {
        revert("Encoding not yet supported");
    }
}
'''
# pylint: enable=line-too-long

_SHAPES_PROTO = '''
name: "shapes.proto"
syntax: "proto3"
enum_type {
  name: "Color"
  value { name: "RED" number: 0 }
  value { name: "GREEN" number: 1 }
  value { name: "BLUE" number: 2 }
}
message_type {
  name: "Point"
  field { name: "x" number: 1 label: LABEL_OPTIONAL type: TYPE_SINT32 }
  field { name: "y" number: 2 label: LABEL_OPTIONAL type: TYPE_SFIXED32 }
}
'''

_DRAWING_PROTO = '''
name: "art/drawing.proto"
syntax: "proto3"
dependency: "shapes.proto"
message_type {
  name: "Drawing"
  field { name: "title" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  field {
    name: "color"
    number: 2
    label: LABEL_OPTIONAL
    type: TYPE_ENUM
    type_name: ".Color"
  }
  field {
    name: "points"
    number: 3
    label: LABEL_REPEATED
    type: TYPE_MESSAGE
    type_name: ".Point"
  }
  field {
    name: "weights"
    number: 4
    label: LABEL_REPEATED
    type: TYPE_FIXED64
    options { packed: true }
  }
}
'''


def _generate(*texts, options=None) -> list[OutputFile]:
    return codegen_sol.process_proto_files(
        [_parse(text) for text in texts],
        options or codegen_sol.GeneratorOptions(),
    )


class GeneratedFileTest(unittest.TestCase):
    """Tests complete generated files."""

    def test_single_message(self):
        (output,) = _generate(_VALUE_PROTO)
        self.assertEqual(output.name(), 'value.sol')
        self.assertEqual(output.content(), _VALUE_SOL)

    def test_generation_is_deterministic(self):
        first = [o.content() for o in _generate(_SHAPES_PROTO, _DRAWING_PROTO)]
        second = [
            o.content() for o in _generate(_SHAPES_PROTO, _DRAWING_PROTO)
        ]
        self.assertEqual(first, second)

    def test_options(self):
        (output,) = _generate(
            _VALUE_PROTO,
            options=codegen_sol.GeneratorOptions(
                license='MIT',
                solidity_version='>=0.7.0 <0.9.0',
                protobuf_lib='lib/ProtobufLib.sol',
            ),
        )
        self.assertTrue(
            output.content().startswith(
                '// SPDX-License-Identifier: MIT\n'
                'pragma solidity >=0.7.0 <0.9.0;\n'
                'pragma experimental ABIEncoderV2;\n'
                '\n'
                'import "lib/ProtobufLib.sol";\n'
            )
        )

    def test_schema_error_aborts_every_file(self):
        bad = _SHAPES_PROTO.replace(
            'syntax: "proto3"', 'syntax: "proto3"\npackage: "shapes"'
        )
        with self.assertRaises(PackageForbiddenError):
            _generate(_VALUE_PROTO, bad)


class CrossFileTest(unittest.TestCase):
    """Tests a request whose files reference each other."""

    def setUp(self):
        shapes, drawing = _generate(_SHAPES_PROTO, _DRAWING_PROTO)
        self.shapes = shapes.content()
        self.drawing = drawing.content()
        self.drawing_name = drawing.name()

    def test_output_names(self):
        self.assertEqual(self.drawing_name, 'art/drawing.sol')

    def test_relative_import(self):
        self.assertIn('import "../shapes.sol";\n', self.drawing)

    def test_enum_declared_once(self):
        self.assertIn(
            'enum Color {\n    RED,\n    GREEN,\n    BLUE\n}\n', self.shapes
        )
        self.assertNotIn('enum Color', self.drawing)

    def test_enums_precede_structs(self):
        self.assertLess(
            self.shapes.index('enum Color'), self.shapes.index('struct Point')
        )

    def test_struct(self):
        self.assertIn(
            'struct Drawing {\n'
            '    string title;\n'
            '    Color color;\n'
            '    Point[] points;\n'
            '    uint64[] weights;\n'
            '}\n',
            self.drawing,
        )

    def test_range_check_uses_other_file_enum(self):
        self.assertIn('if (v < 0 || v > 2) {', self.drawing)

    def test_check_key_wire_types(self):
        self.assertIn(
            '        if (field_number == 1) {\n'
            '            return wire_type == '
            'ProtobufLib.WireType.LengthDelimited;\n',
            self.drawing,
        )
        self.assertIn(
            '        if (field_number == 2) {\n'
            '            return wire_type == ProtobufLib.WireType.Varint;\n',
            self.drawing,
        )
        self.assertIn(
            '        if (field_number == 4) {\n'
            '            return wire_type == '
            'ProtobufLib.WireType.LengthDelimited;\n',
            self.drawing,
        )
        self.assertIn(
            '        if (field_number == 2) {\n'
            '            return wire_type == ProtobufLib.WireType.Bits32;\n',
            self.shapes,
        )

    def test_field_bound(self):
        self.assertIn('if (field_number > 4) {', self.drawing)
        self.assertIn('if (field_number > 2) {', self.shapes)

    def test_bounds_checks_cannot_overflow(self):
        # Guards must not overflow under checked arithmetic.
        for content in (self.shapes, self.drawing):
            self.assertNotRegex(content, r'\+ \w+ < ')
        self.assertIn('if (len > ~uint64(0) - pos) {', self.drawing)
        self.assertIn(
            'if (pos > end_pos || len > end_pos - pos) {', self.drawing
        )

    def test_one_function_per_field(self):
        for number in range(1, 5):
            self.assertIn(f'function decode_{number}(', self.drawing)
        self.assertNotIn('function decode_5(', self.drawing)

    def test_repeated_message_uses_codec(self):
        self.assertIn('PointCodec.decode(p, buf, size);', self.drawing)

    def test_codecs(self):
        self.assertIn('library PointCodec {', self.shapes)
        self.assertIn('library DrawingCodec {', self.drawing)
        self.assertIn(
            'function encode(Drawing memory) internal pure '
            'returns (bytes memory) {\n'
            '        revert("Encoding not yet supported");\n',
            self.drawing,
        )

    def test_reverse_file_order(self):
        # Enums are collected from every file before any message is emitted.
        drawing, _ = _generate(_DRAWING_PROTO, _SHAPES_PROTO)
        self.assertIn('if (v < 0 || v > 2) {', drawing.content())


class EmitEnumTest(unittest.TestCase):
    """Tests emit_enum."""

    def _enum(self, *values) -> ProtoEnum:
        proto_enum = ProtoEnum('Level', 'test.proto')
        for name, number in values:
            proto_enum.add_value(name, number)
        return proto_enum

    def test_enum(self):
        output = OutputFile('test.sol')
        symbols = SymbolTable()
        codegen_sol.emit_enum(
            self._enum(('LOW', 0), ('HIGH', 1)), output, symbols
        )
        self.assertEqual(
            output.content(), 'enum Level {\n    LOW,\n    HIGH\n}\n'
        )
        self.assertEqual(symbols.enum_max('Level'), 1)

    def test_single_value(self):
        output = OutputFile('test.sol')
        codegen_sol.emit_enum(self._enum(('ONLY', 0)), output, SymbolTable())
        self.assertEqual(output.content(), 'enum Level {\n    ONLY\n}\n')

    def test_gap_rejected(self):
        with self.assertRaises(EnumOrdinalSequenceError):
            codegen_sol.emit_enum(
                self._enum(('LOW', 0), ('HIGH', 2)),
                OutputFile('test.sol'),
                SymbolTable(),
            )

    def test_not_starting_at_zero_rejected(self):
        with self.assertRaises(EnumOrdinalSequenceError):
            codegen_sol.emit_enum(
                self._enum(('LOW', 1)), OutputFile('test.sol'), SymbolTable()
            )

    def test_empty_rejected(self):
        with self.assertRaises(EnumOrdinalSequenceError):
            codegen_sol.emit_enum(
                self._enum(), OutputFile('test.sol'), SymbolTable()
            )

    def test_rejected_through_request(self):
        with self.assertRaises(EnumOrdinalSequenceError):
            _generate(
                _SHAPES_PROTO.replace(
                    'name: "BLUE" number: 2', 'name: "BLUE" number: 3'
                )
            )


if __name__ == '__main__':
    unittest.main()
