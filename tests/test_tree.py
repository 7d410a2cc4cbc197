# test_tree.py -- Tests for the binary tree format
# Copyright (C) 2024 The gitcore developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitcore is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Tests for gitcore.tree."""

import binascii

from gitcore.crypto import ZERO_SHA
from gitcore.errors import CorruptObject, InvalidEncoding, UnknownMode
from gitcore.mode import Mode
from gitcore.tree import (
    TreeEntry,
    key_entry,
    parse_tree,
    pretty_format_tree_entry,
    serialize_tree,
    sorted_tree_entries,
)

from . import TestCase

a_sha = "6f670c0fb53f9463760b7295fbb814e965fb20c8"
b_sha = "2969be3e8ee1c0222396a5611407e4769f14e54b"


def _record(mode: bytes, path: bytes, sha: str) -> bytes:
    return mode + b" " + path + b"\0" + binascii.unhexlify(sha)


class ParseTreeTests(TestCase):
    def test_single(self) -> None:
        raw = b"100644 a.txt\0" + b"\0" * 20
        self.assertEqual([TreeEntry(Mode.FILE, "a.txt", ZERO_SHA)], parse_tree(raw))

    def test_roundtrip_single(self) -> None:
        raw = b"100644 a.txt\0" + b"\0" * 20
        self.assertEqual(raw, serialize_tree(parse_tree(raw)))

    def test_multiple(self) -> None:
        raw = (
            _record(b"100755", b"run.sh", a_sha)
            + _record(b"40000", b"sub", b_sha)
            + _record(b"120000", b"link", a_sha)
        )
        entries = parse_tree(raw)
        self.assertEqual(
            [
                TreeEntry(Mode.EXECUTABLE, "run.sh", a_sha),
                TreeEntry(Mode.DIRECTORY, "sub", b_sha),
                TreeEntry(Mode.SYMLINK, "link", a_sha),
            ],
            entries,
        )
        self.assertEqual(raw, serialize_tree(entries))

    def test_entry_length(self) -> None:
        entries = parse_tree(_record(b"40000", b"sub", b_sha) + _record(b"100644", b"f", a_sha))
        self.assertEqual([5 + 1 + 3 + 1 + 20, 6 + 1 + 1 + 1 + 20], [e.length for e in entries])

    def test_length_not_compared(self) -> None:
        self.assertEqual(
            TreeEntry(Mode.FILE, "a", a_sha, 27), TreeEntry(Mode.FILE, "a", a_sha)
        )

    def test_empty(self) -> None:
        self.assertEqual([], parse_tree(b""))

    def test_leading_zero_directory_mode(self) -> None:
        entries = parse_tree(_record(b"040000", b"sub", b_sha))
        self.assertEqual(Mode.DIRECTORY, entries[0].mode)

    def test_path_with_space(self) -> None:
        entries = parse_tree(_record(b"100644", b"a b.txt", a_sha))
        self.assertEqual("a b.txt", entries[0].path)

    def test_truncated_sha(self) -> None:
        raw = _record(b"100644", b"a.txt", a_sha)
        self.assertRaises(CorruptObject, parse_tree, raw[:-1])

    def test_truncated_second_record(self) -> None:
        raw = _record(b"100644", b"a", a_sha) + b"100644 b"
        self.assertRaises(CorruptObject, parse_tree, raw)

    def test_space_misplaced(self) -> None:
        self.assertRaises(CorruptObject, parse_tree, _record(b"1006", b"a", a_sha))
        self.assertRaises(CorruptObject, parse_tree, _record(b"1006440", b"a", a_sha))

    def test_no_space(self) -> None:
        self.assertRaises(CorruptObject, parse_tree, b"100644")

    def test_mode_not_digits(self) -> None:
        self.assertRaises(CorruptObject, parse_tree, _record(b"10064x", b"a", a_sha))

    def test_unknown_mode(self) -> None:
        self.assertRaises(UnknownMode, parse_tree, _record(b"100664", b"a", a_sha))

    def test_invalid_path_encoding(self) -> None:
        self.assertRaises(
            InvalidEncoding, parse_tree, _record(b"100644", b"\xff.txt", a_sha)
        )


class SerializeTreeTests(TestCase):
    def test_directory_mode(self) -> None:
        self.assertEqual(
            _record(b"40000", b"sub", b_sha),
            serialize_tree([TreeEntry(Mode.DIRECTORY, "sub", b_sha)]),
        )

    def test_keeps_order(self) -> None:
        entries = [TreeEntry(Mode.FILE, "b", b_sha), TreeEntry(Mode.FILE, "a", a_sha)]
        self.assertEqual(
            _record(b"100644", b"b", b_sha) + _record(b"100644", b"a", a_sha),
            serialize_tree(entries),
        )

    def test_invalid_sha(self) -> None:
        self.assertRaises(
            ValueError, serialize_tree, [TreeEntry(Mode.FILE, "a", "abcd")]
        )
        self.assertRaises(
            ValueError, serialize_tree, [TreeEntry(Mode.FILE, "a", "z" * 40)]
        )

    def test_nul_in_path(self) -> None:
        self.assertRaises(
            ValueError, serialize_tree, [TreeEntry(Mode.FILE, "a\0b", a_sha)]
        )

    def test_utf8_path(self) -> None:
        entries = [TreeEntry(Mode.FILE, "grüße.txt", a_sha)]
        self.assertEqual(entries, parse_tree(serialize_tree(entries)))


class TreeOrderTests(TestCase):
    def test_key_entry(self) -> None:
        self.assertEqual(b"sub/", key_entry(TreeEntry(Mode.DIRECTORY, "sub", b_sha)))
        self.assertEqual(b"sub", key_entry(TreeEntry(Mode.FILE, "sub", a_sha)))

    def test_sorted_tree_entries(self) -> None:
        # "a.c" sorts before the directory "a", which compares as "a/"
        entries = [
            TreeEntry(Mode.DIRECTORY, "a", b_sha),
            TreeEntry(Mode.FILE, "a.c", a_sha),
            TreeEntry(Mode.FILE, "B", a_sha),
        ]
        self.assertEqual(
            ["B", "a.c", "a"], [e.path for e in sorted_tree_entries(entries)]
        )


class TreeEntryTests(TestCase):
    def test_pretty_format(self) -> None:
        self.assertEqual(
            f"040000 tree {b_sha}\tsub\n",
            pretty_format_tree_entry(TreeEntry(Mode.DIRECTORY, "sub", b_sha)),
        )
        self.assertEqual(
            f"100644 blob {a_sha}\ta\n",
            pretty_format_tree_entry(TreeEntry(Mode.FILE, "a", a_sha)),
        )
