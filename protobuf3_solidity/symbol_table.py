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
"""Per-run table of the enums known to the generator."""


class SymbolTable:
    """Maps qualified enum names to their maximum ordinal.

    Populated by the enum emitter for every enum in the request before any
    message is emitted; message emission only reads from it.
    """

    def __init__(self) -> None:
        self._enum_max: dict[str, int] = {}

    def add_enum(self, qualified_name: str, max_ordinal: int) -> None:
        if qualified_name in self._enum_max:
            raise ValueError(f'Enum {qualified_name} is already registered')
        self._enum_max[qualified_name] = max_ordinal

    def enum_max(self, qualified_name: str) -> int:
        """Returns the max ordinal of an enum.

        Raises:
          KeyError: The enum has not been emitted yet.
        """
        return self._enum_max[qualified_name]

    def has_enum(self, qualified_name: str) -> bool:
        return qualified_name in self._enum_max

    def __len__(self) -> int:
        return len(self._enum_max)
