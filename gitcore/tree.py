# tree.py -- Binary entry list of tree objects
# Copyright (C) 2026 The gitcore developers
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

"""Parsing and serialization of tree payloads.

A tree payload is a concatenation of records of the form::

    <mode> 0x20 <path> 0x00 <20 byte sha>

with no separator between records and no record count, so the only end marker
is the end of the buffer.
"""

__all__ = [
    "TreeEntry",
    "key_entry",
    "parse_tree",
    "pretty_format_tree_entry",
    "serialize_tree",
    "sorted_tree_entries",
]

import binascii
from collections.abc import Iterable
from dataclasses import dataclass, field

from .crypto import HEX_LENGTH, OID_LENGTH
from .errors import CorruptObject, InvalidEncoding
from .mode import Mode


@dataclass(frozen=True)
class TreeEntry:
    """A single (mode, path, sha) record of a tree.

    ``length`` is the number of payload bytes the record occupied when it was
    parsed. It is only used to advance the parser and is ignored when
    comparing entries.
    """

    mode: Mode
    path: str
    sha: str
    length: int = field(default=0, compare=False)


def parse_tree(raw: bytes) -> list[TreeEntry]:
    """Parse a tree payload.

    Args:
      raw: Uncompressed payload of a tree object
    Returns: list of TreeEntry, in the order they appear
    Raises:
      CorruptObject: if a record is malformed or truncated
      UnknownMode: if a mode is not a known git mode
      InvalidEncoding: if a path is not valid UTF-8
    """
    entries = []
    offset = 0
    length = len(raw)
    while offset < length:
        space = raw.find(b" ", offset)
        # mode is a 5 or 6 digit number
        if space not in (offset + 5, offset + 6):
            raise CorruptObject(f"inconsistent input at offset {offset}")
        mode_text = raw[offset:space]
        if not mode_text.isdigit():
            raise CorruptObject(f"invalid mode {mode_text!r}")
        mode = Mode.from_int(int(mode_text))
        null = raw.find(b"\0", space)
        if null == -1:
            raise CorruptObject(f"unterminated path at offset {space + 1}")
        try:
            path = raw[space + 1 : null].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncoding("tree entry path", raw[space + 1 : null]) from exc
        end = null + 1 + OID_LENGTH
        if end > length:
            raise CorruptObject(f"truncated sha for {path!r}")
        sha = binascii.hexlify(raw[null + 1 : end]).decode("ascii")
        entries.append(TreeEntry(mode, path, sha, end - offset))
        offset = end
    return entries


def serialize_tree(entries: Iterable[TreeEntry]) -> bytes:
    """Serialize tree entries.

    Entries are written in the order given; no sorting is applied.

    Args:
      entries: Iterable over TreeEntry
    Returns: Serialized tree payload
    Raises:
      ValueError: if a sha is not 40 hex digits or a path contains NUL
    """
    chunks = []
    for entry in entries:
        if "\0" in entry.path:
            raise ValueError(f"NUL in tree entry path {entry.path!r}")
        if len(entry.sha) != HEX_LENGTH:
            raise ValueError(f"Incorrect length of hexsha: {entry.sha}")
        try:
            sha = binascii.unhexlify(entry.sha)
        except binascii.Error as exc:
            raise ValueError(f"invalid hexsha {entry.sha!r}") from exc
        chunks.append(
            str(int(entry.mode)).encode("ascii")
            + b" "
            + entry.path.encode("utf-8")
            + b"\0"
            + sha
        )
    return b"".join(chunks)


def key_entry(entry: TreeEntry) -> bytes:
    """Sort key for tree entry.

    Directories sort as if their name had a trailing slash.
    """
    name = entry.path.encode("utf-8")
    if entry.mode.is_dir:
        name += b"/"
    return name


def sorted_tree_entries(entries: Iterable[TreeEntry]) -> list[TreeEntry]:
    """Return entries in the order git itself writes them."""
    return sorted(entries, key=key_entry)


def pretty_format_tree_entry(entry: TreeEntry) -> str:
    """Format a tree entry the way ``git ls-tree`` does."""
    return f"{entry.mode.stat_mode:06o} {entry.mode.object_type} {entry.sha}\t{entry.path}\n"
