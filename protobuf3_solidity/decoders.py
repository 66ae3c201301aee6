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
"""This module defines the per-field decode functions of a codec library.

Every message field gets a dedicated Solidity function with the signature

    function decode_<N>(uint64 pos, bytes memory buf, uint64 end_pos,
                        <Message> memory instance)
        internal pure returns (bool, uint64)

which is called after the field's key has been consumed. ``end_pos`` is the
end of the enclosing message; no field may read past it. Failures never
revert: every function returns a success flag and the current position.
"""

import abc
from typing import Callable

from protobuf3_solidity.proto_tree import (
    EnumKind,
    MessageKind,
    ProtoMessage,
    ProtoMessageField,
    ScalarKind,
)
from protobuf3_solidity.symbol_table import SymbolTable
from protobuf3_solidity.type_mapping import (
    PROTOBUF_LIB,
    WireType,
    decoder_function,
    field_type_name,
    is_length_delimited_scalar,
)

_BOOL = 'bool'


def return_false(position: str = 'pos', *values: str) -> str:
    returned = ', '.join(['false', position, *values])
    return f'return ({returned});'


def fail_if(
    condition: str, position: str = 'pos', *values: str
) -> list[str]:
    """Lines returning failure from a decode function when condition holds.

    The failure tuple is (false, position, *values).
    """
    return [
        f'if ({condition}) {{',
        f'    {return_false(position, *values)}',
        '}',
    ]


def _indented(lines: list[str]) -> list[str]:
    return ['    ' + line if line else line for line in lines]


def _out_of_bounds(start: str, length: str, end: str = 'end_pos') -> str:
    """Condition which is true if [start, start + length) overflows end.

    The condition only subtracts, and never overflows when evaluated with
    checked arithmetic.
    """
    return f'{start} > {end} || {length} > {end} - {start}'


# Produces the lines decoding one element at cursor `p`. The argument is the
# Solidity expression the element is stored into, or None to only validate.
ElementStep = Callable[[str | None], list[str]]


def count_allocate_refill(
    member: str,
    element_type: str,
    start: str,
    limit: str,
    element: ElementStep,
    separator: Callable[[str], list[str]] | None = None,
    after_count: list[str] | None = None,
) -> list[str]:
    """Generates the two-pass decode loop of a repeated field.

    Solidity memory arrays cannot grow, so the elements are first counted by
    decoding them once, then the array is allocated and the same bytes are
    decoded again into it.

    Args:
      member: the struct member receiving the array, e.g. 'instance.values'.
      element_type: the Solidity type of one element.
      start: expression for the position of the first element.
      limit: expression for the position no element may start at or after.
      element: generates the decode of one element.
      separator: generates the lines run before every element but the
          first, given the expression of the element's index. The lines may
          'break' out of the counting loop.
      after_count: checks run once the elements have been counted.
    """
    lines: list[str] = []

    lines.append('// Count the elements')
    lines.append('uint64 cnt = 0;')
    lines.append(f'uint64 p = {start};')
    lines.append(f'while (p < {limit}) {{')
    if separator is not None:
        lines += _indented(separator('cnt'))
    lines += _indented(element(None))
    lines.append('    cnt += 1;')
    lines.append('}')
    if after_count:
        lines += after_count

    lines.append('')
    lines.append('// Allocate the array and decode the elements into it')
    lines.append(f'{member} = new {element_type}[](cnt);')
    lines.append(f'p = {start};')
    lines.append('for (uint64 i = 0; i < cnt; i++) {')
    if separator is not None:
        lines += _indented(separator('i'))
    lines += _indented(element(f'{member}[i]'))
    lines.append('}')

    return lines


class FieldDecoder(abc.ABC):
    """Base class for the decode function of one field of a message."""

    def __init__(
        self,
        field: ProtoMessageField,
        message: ProtoMessage,
        symbols: SymbolTable,
    ):
        """Creates the decoder of a field.

        Args:
          field: the field being decoded.
          message: the message the field belongs to.
          symbols: max ordinals of every enum in the request.
        """
        self._field: ProtoMessageField = field
        self._message: ProtoMessage = message
        self._symbols: SymbolTable = symbols

    def name(self) -> str:
        return f'decode_{self._field.number()}'

    def params(self) -> list[tuple[str, str]]:
        return [
            ('uint64', 'pos'),
            ('bytes memory', 'buf'),
            ('uint64', 'end_pos'),
            (f'{self._message.name()} memory', 'instance'),
        ]

    def param_string(self) -> str:
        return ', '.join(f'{type} {name}' for type, name in self.params())

    def member(self) -> str:
        return f'instance.{self._field.name()}'

    @abc.abstractmethod
    def body(self) -> list[str]:
        """Returns the function body as a list of source code lines."""


class ScalarDecoder(FieldDecoder):
    """Decodes a varint or fixed-width field with a ProtobufLib primitive."""

    def _proto_type(self) -> int:
        kind = self._field.kind()
        assert isinstance(kind, ScalarKind)
        return kind.proto_type

    def _is_default(self, value: str) -> str:
        if field_type_name(self._field) == _BOOL:
            return f'!{value}'
        return f'{value} == 0'

    def body(self) -> list[str]:
        decode_fn = decoder_function(self._proto_type())
        lines = [
            'bool success;',
            f'{field_type_name(self._field)} v;',
            f'(success, pos, v) = {decode_fn}(pos, buf);',
        ]
        lines += fail_if('!success')
        lines.append('')
        lines.append('// Default values must not be encoded')
        lines += fail_if(self._is_default('v'))
        lines.append('')
        lines.append(f'{self.member()} = v;')
        lines.append('return (true, pos);')
        return lines


class BytesDecoder(ScalarDecoder):
    """Decodes a string or bytes field by copying it out of the buffer."""

    def body(self) -> list[str]:
        lines = [
            'bool success;',
            'uint64 len;',
            f'(success, pos, len) = {PROTOBUF_LIB}.decode_length_delimited('
            'pos, buf);',
        ]
        lines += fail_if('!success')
        lines.append('')
        lines.append('// Default values must not be encoded')
        lines += fail_if('len == 0')
        lines += fail_if(_out_of_bounds('pos', 'len'))
        lines.append('')
        lines.append('bytes memory data = new bytes(len);')
        lines.append('for (uint64 i = 0; i < len; i++) {')
        lines.append('    data[i] = buf[pos + i];')
        lines.append('}')
        lines.append('pos += len;')
        lines.append('')
        if field_type_name(self._field) == 'string':
            lines.append(f'{self.member()} = string(data);')
        else:
            lines.append(f'{self.member()} = data;')
        lines.append('return (true, pos);')
        return lines


class EnumDecoder(FieldDecoder):
    """Decodes an enum field, checking the value against the enum's range."""

    def _enum_name(self) -> str:
        kind = self._field.kind()
        assert isinstance(kind, EnumKind)
        return kind.ref

    def range_check(self, value: str, position: str = 'pos') -> list[str]:
        max_ordinal = self._symbols.enum_max(self._enum_name())
        return fail_if(f'{value} < 0 || {value} > {max_ordinal}', position)

    def conversion(self, value: str) -> str:
        return f'{self._enum_name()}(uint32({value}))'

    def body(self) -> list[str]:
        lines = [
            'bool success;',
            'int32 v;',
            f'(success, pos, v) = {PROTOBUF_LIB}.decode_enum(pos, buf);',
        ]
        lines += fail_if('!success')
        lines.append('')
        lines.append('// Default values must not be encoded')
        lines += fail_if('v == 0')
        lines.append('')
        lines.append('// Enum values must be in range')
        lines += self.range_check('v')
        lines.append('')
        lines.append(f'{self.member()} = {self.conversion("v")};')
        lines.append('return (true, pos);')
        return lines


class MessageDecoder(FieldDecoder):
    """Decodes an embedded message with the message's own codec."""

    def _type_name(self) -> str:
        kind = self._field.kind()
        assert isinstance(kind, MessageKind)
        return kind.ref

    def _codec_name(self) -> str:
        return f'{self._type_name()}Codec'

    def decode_embedded(self, position: str, target: str | None) -> list[str]:
        """Decodes one length-prefixed embedded message at position."""
        lines = [
            'uint64 size;',
            f'(success, {position}, size) = '
            f'{PROTOBUF_LIB}.decode_embedded_message({position}, buf);',
        ]
        lines += fail_if('!success', position)
        lines += fail_if(_out_of_bounds(position, 'size'), position)
        lines.append(f'{self._type_name()} memory nested;')
        lines.append(
            f'(success, {position}, nested) = '
            f'{self._codec_name()}.decode({position}, buf, size);'
        )
        lines += fail_if('!success', position)
        if target is not None:
            lines.append(f'{target} = nested;')
        return lines

    def body(self) -> list[str]:
        lines = ['bool success;']
        lines += self.decode_embedded('pos', self.member())
        lines.append('')
        lines.append('return (true, pos);')
        return lines


class PackedRepeatedDecoder(FieldDecoder):
    """Decodes a packed repeated numeric or enum field.

    The elements are concatenated inside one length-delimited run.
    """

    def _element(self, target: str | None) -> list[str]:
        match self._field.kind():
            case EnumKind():
                enum_decoder = EnumDecoder(
                    self._field, self._message, self._symbols
                )
                lines = [
                    'int32 v;',
                    f'(success, p, v) = {PROTOBUF_LIB}.decode_enum(p, buf);',
                ]
                lines += fail_if('!success', 'p')
                lines += enum_decoder.range_check('v', 'p')
                value = enum_decoder.conversion('v')
            case ScalarKind(proto_type):
                lines = [
                    f'{field_type_name(self._field)} v;',
                    '(success, p, v) = '
                    f'{decoder_function(proto_type)}(p, buf);',
                ]
                lines += fail_if('!success', 'p')
                value = 'v'
            case MessageKind():
                raise ValueError('Message fields cannot be packed')

        if target is not None:
            lines.append(f'{target} = {value};')
        return lines

    def body(self) -> list[str]:
        lines = [
            'bool success;',
            'uint64 len;',
            f'(success, pos, len) = {PROTOBUF_LIB}.decode_length_delimited('
            'pos, buf);',
        ]
        lines += fail_if('!success')
        lines += fail_if(_out_of_bounds('pos', 'len'))
        lines.append('uint64 wrapper_end = pos + len;')
        lines.append('')
        lines += count_allocate_refill(
            self.member(),
            field_type_name(self._field),
            start='pos',
            limit='wrapper_end',
            element=self._element,
            after_count=(
                ['// Elements must exactly fill the packed run']
                + fail_if('p != wrapper_end', 'p')
            ),
        )
        lines.append('')
        lines.append('pos = wrapper_end;')
        lines.append('return (true, pos);')
        return lines


class RepeatedMessageDecoder(MessageDecoder):
    """Decodes a repeated message field.

    Elements are not packed: each one is a separate key and embedded message,
    and the keys of the field appear consecutively. The first key has already
    been consumed by the message's decode loop.
    """

    def _separator(self, index: str) -> list[str]:
        number = self._field.number()
        length_delimited = WireType.LENGTH_DELIMITED.sol_name()
        lines = [
            f'if ({index} > 0) {{',
            '    uint64 next_field_number;',
            f'    {PROTOBUF_LIB}.WireType next_wire_type;',
            '    uint64 next_p;',
            '    (success, next_p, next_field_number, next_wire_type) = '
            f'{PROTOBUF_LIB}.decode_key(p, buf);',
        ]
        lines += _indented(fail_if('!success', 'p'))
        lines += [
            f'    if (next_field_number != {number}) {{',
            '        break;',
            '    }',
        ]
        lines += _indented(
            fail_if(f'next_wire_type != {length_delimited}', 'p')
        )
        lines += ['    p = next_p;', '}']
        return lines

    def body(self) -> list[str]:
        lines = ['bool success;', '']
        lines += count_allocate_refill(
            self.member(),
            self._type_name(),
            start='pos',
            limit='end_pos',
            element=lambda target: self.decode_embedded('p', target),
            separator=self._separator,
            after_count=(
                ['// The key already consumed must be followed by an element']
                + fail_if('cnt == 0', 'p')
            ),
        )
        lines.append('')
        lines.append('pos = p;')
        lines.append('return (true, pos);')
        return lines


def field_decoder(
    field: ProtoMessageField,
    message: ProtoMessage,
    symbols: SymbolTable,
) -> FieldDecoder:
    """Selects the decoder generating the decode function of a field."""
    decoder_class: type[FieldDecoder]

    match field.kind():
        case ScalarKind() if field.is_repeated():
            decoder_class = PackedRepeatedDecoder
        case ScalarKind(proto_type) if is_length_delimited_scalar(proto_type):
            decoder_class = BytesDecoder
        case ScalarKind():
            decoder_class = ScalarDecoder
        case EnumKind() if field.is_repeated():
            decoder_class = PackedRepeatedDecoder
        case EnumKind():
            decoder_class = EnumDecoder
        case MessageKind() if field.is_repeated():
            decoder_class = RepeatedMessageDecoder
        case MessageKind():
            decoder_class = MessageDecoder

    return decoder_class(field, message, symbols)
