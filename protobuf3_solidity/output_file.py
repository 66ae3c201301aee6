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
"""Defines a class which accumulates the text of a generated file."""


class OutputFile:
    """The text of one generated .sol file, built a line at a time.

    Emitters append Solidity source lines; the current indentation is
    prepended to each non-blank line. Nested blocks are written inside
    ``indent()``:

    ```
    output = OutputFile('point.sol')
    output.write_line('struct Point {')
    with output.indent():
        output.write_lines(['int32 x;', 'int32 y;'])
    output.write_line('}')
    ```

    Blank lines never carry indentation, so the generated files have no
    trailing whitespace.
    """

    INDENT_WIDTH = 4

    def __init__(self, filename: str):
        self._filename: str = filename
        self._content: list[str] = []
        self._indentation: int = 0

    def write_line(self, line: str = '') -> None:
        if line:
            self._content.append(' ' * self._indentation)
            self._content.append(line)
        self._content.append('\n')

    def write_lines(self, lines: list[str]) -> None:
        """Writes a function body or other pre-built block of lines."""
        for line in lines:
            self.write_line(line)

    def indent(self) -> 'OutputFile._IndentationContext':
        """Indents lines written within the returned context by one level."""
        return self._IndentationContext(self)

    def name(self) -> str:
        """Path of the .sol file, relative to the protoc output directory."""
        return self._filename

    def content(self) -> str:
        return ''.join(self._content)

    class _IndentationContext:
        """Adds one indentation level to an OutputFile while active."""

        def __init__(self, output: 'OutputFile'):
            self._output = output

        def __enter__(self):
            self._output._indentation += OutputFile.INDENT_WIDTH

        def __exit__(self, typ, value, traceback):
            self._output._indentation -= OutputFile.INDENT_WIDTH
