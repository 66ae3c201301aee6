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
"""Tests for the enum symbol table."""

import unittest

from protobuf3_solidity.symbol_table import SymbolTable


class SymbolTableTest(unittest.TestCase):
    """Tests SymbolTable."""

    def setUp(self):
        self.symbols = SymbolTable()

    def test_empty(self):
        self.assertEqual(len(self.symbols), 0)
        self.assertFalse(self.symbols.has_enum('Color'))

    def test_add_enum(self):
        self.symbols.add_enum('Color', 2)
        self.symbols.add_enum('Level', 0)
        self.assertEqual(len(self.symbols), 2)
        self.assertTrue(self.symbols.has_enum('Color'))
        self.assertEqual(self.symbols.enum_max('Color'), 2)
        self.assertEqual(self.symbols.enum_max('Level'), 0)

    def test_duplicate_rejected(self):
        self.symbols.add_enum('Color', 2)
        with self.assertRaises(ValueError):
            self.symbols.add_enum('Color', 3)
        self.assertEqual(self.symbols.enum_max('Color'), 2)

    def test_unknown_enum(self):
        with self.assertRaises(KeyError):
            self.symbols.enum_max('Color')


if __name__ == '__main__':
    unittest.main()
