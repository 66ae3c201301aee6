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
"""Schema errors raised while validating and generating Solidity code.

Any of these aborts generation of the whole request. Errors in the wire data
itself only exist inside the generated decoders, as boolean success flags.
"""


class SchemaError(Exception):
    """Base class for every schema violation found by the generator."""

    def __init__(
        self,
        error_message: str,
        path: str,
        field: str | None = None,
    ):
        super().__init__(f'protoc-gen-sol error: {error_message}')
        self.error_message = error_message
        self.path = path
        self.field = field

    def formatted_message(self) -> str:
        lines = [
            f'protoc-gen-sol error: {self.error_message}',
            f'    at {self.path}',
        ]

        if self.field is not None:
            lines.append(f'    in field {self.field}')

        return '\n'.join(lines)


class SyntaxVersionError(SchemaError):
    """The file is not declared as proto3."""


class PackageForbiddenError(SchemaError):
    """The file declares a package."""


class NestedTypeForbiddenError(SchemaError):
    """A message declares nested messages or enums (including map entries)."""


class KeywordCollisionError(SchemaError):
    """An identifier collides with a Solidity reserved word."""


class FieldNumberingError(SchemaError):
    """Field numbers are not exactly 1..N in declaration order."""


class PackingRequiredError(SchemaError):
    """A repeated numeric or enum field is not declared packed."""


class PackingForbiddenError(SchemaError):
    """A repeated string, bytes or message field is declared packed."""


class UnsupportedRepeatedTypeError(SchemaError):
    """Repeated string and bytes fields have no Solidity representation."""


class UnsupportedFieldTypeError(SchemaError):
    """The field type has no native Solidity mapping."""


class EnumOrdinalSequenceError(SchemaError):
    """Enum values are not numbered 0, 1, 2, ... in declaration order."""


class OneofForbiddenError(SchemaError):
    """The field belongs to a oneof (including proto3 optional fields)."""


class UnknownTypeReferenceError(SchemaError):
    """A field refers to an enum or message outside of the request."""


class CyclicReferenceError(SchemaError):
    """A message refers to itself, directly or through other messages."""


class EmptyMessageError(SchemaError):
    """The message has no fields; Solidity structs cannot be empty."""
