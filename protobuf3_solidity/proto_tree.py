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
"""This module defines data structures for protobuf entities.

The structures are read-only views over the FileDescriptorProtos of a
CodeGeneratorRequest. Only top-level enums and messages are modeled, since
the generator rejects nested declarations before emitting any code.
"""

import abc
from dataclasses import dataclass
import enum

from google.protobuf import descriptor_pb2

_FieldDescriptor = descriptor_pb2.FieldDescriptorProto


@dataclass(frozen=True)
class ScalarKind:
    """A field whose type is one of the protobuf scalar types."""

    proto_type: int


@dataclass(frozen=True)
class EnumKind:
    """A field whose type is an enum, by qualified name."""

    ref: str


@dataclass(frozen=True)
class MessageKind:
    """A field whose type is a message, by qualified name."""

    ref: str


FieldKind = ScalarKind | EnumKind | MessageKind


class ProtoNode(abc.ABC):
    """A ProtoNode represents a top-level enum or message in a .proto file."""

    class Type(enum.Enum):
        """The type of a ProtoNode.

        MESSAGE maps to a Solidity struct and its codec library.
        ENUM maps to a Solidity enum.
        """

        MESSAGE = 1
        ENUM = 2

    def __init__(self, name: str, file_name: str):
        self._name: str = name
        self._file_name: str = file_name

    @abc.abstractmethod
    def type(self) -> 'ProtoNode.Type':
        """The type of the node."""

    def name(self) -> str:
        return self._name

    def file_name(self) -> str:
        return self._file_name

    def qualified_name(self) -> str:
        """Fully-qualified protobuf name, without the leading dot.

        Packages are forbidden, so this is the same as the node's name.
        """
        return self._name

    def location(self) -> str:
        """Human readable location of the node for error messages."""
        return f'{self._file_name}: {self._name}'


class ProtoEnum(ProtoNode):
    """Representation of an enum in a .proto file."""

    def __init__(self, name: str, file_name: str):
        super().__init__(name, file_name)
        self._values: list[tuple[str, int]] = []

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.ENUM

    def values(self) -> list[tuple[str, int]]:
        return list(self._values)

    def add_value(self, name: str, value: int) -> None:
        self._values.append((name, value))

    def max_ordinal(self) -> int:
        return max(number for _, number in self._values)


class ProtoMessage(ProtoNode):
    """Representation of a message in a .proto file."""

    def __init__(self, name: str, file_name: str, nested_declarations: int = 0):
        super().__init__(name, file_name)
        self._fields: list['ProtoMessageField'] = []
        self._nested_declarations: int = nested_declarations

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.MESSAGE

    def fields(self) -> list['ProtoMessageField']:
        return list(self._fields)

    def add_field(self, field: 'ProtoMessageField') -> None:
        self._fields.append(field)

    def nested_declarations(self) -> int:
        """Number of messages and enums declared inside this message."""
        return self._nested_declarations

    def codec_name(self) -> str:
        """Name of the generated Solidity library for this message."""
        return f'{self._name}Codec'

    def dependencies(self) -> list[str]:
        """Qualified names of the messages referenced by this message."""
        deps: list[str] = []
        for field in self._fields:
            kind = field.kind()
            if isinstance(kind, MessageKind) and kind.ref not in deps:
                deps.append(kind.ref)
        return deps


# This class is not a node. Fields belong to proto messages and are processed
# separately.
class ProtoMessageField:
    """Representation of a field within a protobuf message."""

    def __init__(
        self,
        field_name: str,
        field_number: int,
        kind: FieldKind,
        repeated: bool = False,
        packed: bool = False,
        oneof: bool = False,
    ):
        self._field_name = field_name
        self._number: int = field_number
        self._kind: FieldKind = kind
        self._repeated: bool = repeated
        self._packed: bool = packed
        self._oneof: bool = oneof

    def name(self) -> str:
        return self._field_name

    def number(self) -> int:
        return self._number

    def kind(self) -> FieldKind:
        return self._kind

    def is_repeated(self) -> bool:
        return self._repeated

    def is_packed(self) -> bool:
        return self._packed

    def in_oneof(self) -> bool:
        return self._oneof


class ProtoFile:
    """The enums and messages declared in a single .proto file."""

    def __init__(
        self,
        name: str,
        syntax: str,
        package: str,
        dependencies: list[str] | None = None,
    ):
        self._name = name
        self._syntax = syntax
        self._package = package
        self._dependencies: list[str] = list(dependencies or [])
        self._enums: list[ProtoEnum] = []
        self._messages: list[ProtoMessage] = []

    def name(self) -> str:
        return self._name

    def syntax(self) -> str:
        return self._syntax

    def package(self) -> str:
        return self._package

    def dependencies(self) -> list[str]:
        return list(self._dependencies)

    def enums(self) -> list[ProtoEnum]:
        return list(self._enums)

    def messages(self) -> list[ProtoMessage]:
        return list(self._messages)

    def add_enum(self, proto_enum: ProtoEnum) -> None:
        self._enums.append(proto_enum)

    def add_message(self, message: ProtoMessage) -> None:
        self._messages.append(message)


def _field_kind(field) -> FieldKind:
    """Classifies a FieldDescriptorProto into one of the field kinds."""
    # The "type_name" member contains the global .proto path of the field's
    # type object, for example ".Message". Without packages the path is the
    # type's name.
    if field.type == _FieldDescriptor.TYPE_ENUM:
        return EnumKind(field.type_name.lstrip('.'))
    if field.type == _FieldDescriptor.TYPE_MESSAGE:
        return MessageKind(field.type_name.lstrip('.'))
    return ScalarKind(field.type)


def _add_enum_values(enum_node: ProtoEnum, proto_enum) -> None:
    """Adds values from a protobuf enum descriptor to an enum node."""
    for value in proto_enum.value:
        enum_node.add_value(value.name, value.number)


def _add_message_fields(message: ProtoMessage, proto_message) -> None:
    """Adds fields from a protobuf message descriptor to a message node."""
    for field in proto_message.field:
        repeated = field.label == _FieldDescriptor.LABEL_REPEATED
        packed = field.options.HasField('packed') and field.options.packed
        message.add_field(
            ProtoMessageField(
                field.name,
                field.number,
                _field_kind(field),
                repeated=repeated,
                packed=packed,
                oneof=field.HasField('oneof_index'),
            )
        )


def build_file(file_descriptor_proto) -> ProtoFile:
    """Constructs the schema view of a single file descriptor."""
    proto_file = ProtoFile(
        file_descriptor_proto.name,
        file_descriptor_proto.syntax,
        file_descriptor_proto.package,
        list(file_descriptor_proto.dependency),
    )

    for proto_enum in file_descriptor_proto.enum_type:
        enum_node = ProtoEnum(proto_enum.name, proto_file.name())
        _add_enum_values(enum_node, proto_enum)
        proto_file.add_enum(enum_node)

    for proto_message in file_descriptor_proto.message_type:
        nested = len(proto_message.nested_type) + len(proto_message.enum_type)
        message = ProtoMessage(proto_message.name, proto_file.name(), nested)
        _add_message_fields(message, proto_message)
        proto_file.add_message(message)

    return proto_file
