# objects.py -- Access to base git objects
# Copyright (C) 2007 James Westby <jw+debian@jameswestby.net>
# Copyright (C) 2008-2013 Jelmer Vernooij <jelmer@jelmer.uk>
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

"""Access to base git objects.

An object is stored as a header naming its type and payload size, followed by
the payload::

    00000000  63 6f 6d 6d 69 74 20 31  30 38 36 00 74 72 65 65  |commit 1086.tree|

The header is the ASCII type name (``blob``, ``commit``, ``tag`` or
``tree``), a space, the payload length in ASCII decimal and a NUL byte. The
SHA-1 of header plus payload is the object's name.
"""

__all__ = [
    "OBJECT_CLASSES",
    "Blob",
    "Commit",
    "ObjectID",
    "ShaFile",
    "Tag",
    "Tree",
    "object_class",
    "object_header",
    "parse_object_header",
]

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, ClassVar

from . import crypto
from .errors import CorruptObject, ObjectFormatException, UnsupportedObjectType
from .mailmap import MESSAGE_KEY, MailMap, format_mail_map, parse_mail_map
from .tree import (
    TreeEntry,
    key_entry,
    parse_tree,
    pretty_format_tree_entry,
    serialize_tree,
)

if TYPE_CHECKING:
    from .repo import Repo

ObjectID = str

# Header fields for commits
_TREE_HEADER = "tree"
_PARENT_HEADER = "parent"
_AUTHOR_HEADER = "author"
_COMMITTER_HEADER = "committer"
_GPGSIG_HEADER = "gpgsig"

# Header fields for tags
_OBJECT_HEADER = "object"
_TYPE_HEADER = "type"
_TAG_HEADER = "tag"
_TAGGER_HEADER = "tagger"


def object_header(type_name: str, length: int) -> bytes:
    """Return an object header for the given type name and payload length."""
    return f"{type_name} {length}\0".encode("ascii")


def parse_object_header(raw: bytes) -> tuple[str, int, int]:
    """Split the header off a decompressed object.

    Args:
      raw: Decompressed object contents (header and payload)
    Returns: tuple of (type name, declared size, offset of the payload)
    Raises:
      CorruptObject: if the header delimiters are missing or malformed
    """
    space = raw.find(b" ")
    if space == -1:
        raise CorruptObject("no space after type name in object header")
    null = raw.find(b"\0", space + 1)
    if null == -1 or b"\0" in raw[:space]:
        raise CorruptObject("no NUL after size in object header")
    try:
        type_name = raw[:space].decode("ascii")
    except UnicodeDecodeError as exc:
        raise CorruptObject(f"invalid type name {raw[:space]!r}") from exc
    size_text = raw[space + 1 : null]
    if not size_text.isdigit():
        raise CorruptObject(f"invalid object size {size_text!r}")
    return type_name, int(size_text), null + 1


def object_class(type_name: str) -> type["ShaFile"]:
    """Get the object class corresponding to the given type name.

    Raises:
      UnsupportedObjectType: if the type name is not known
    """
    try:
        return _TYPE_MAP[type_name]
    except KeyError as exc:
        raise UnsupportedObjectType(type_name) from exc


class ShaFile:
    """A git SHA file.

    Subclasses implement ``_deserialize`` to decode a payload and
    ``_serialize`` to encode their contents. An object created from a payload
    keeps that payload, so serializing it again always yields the stored
    bytes.
    """

    type_name: ClassVar[str]

    _raw: bytes | None
    _sha: str | None

    def __init__(self, repo: "Repo | None" = None) -> None:
        self.repo = repo
        self._raw = None
        self._sha = None

    def _deserialize(self, raw: bytes) -> None:
        raise NotImplementedError(self._deserialize)

    def _serialize(self) -> bytes:
        raise NotImplementedError(self._serialize)

    @classmethod
    def from_raw_string(cls, raw: bytes, repo: "Repo | None" = None) -> "ShaFile":
        """Create an object of this type from its uncompressed payload.

        Raises:
          ObjectFormatException: if the payload can not be decoded
        """
        obj = cls(repo=repo)
        obj._deserialize(raw)
        obj._raw = bytes(raw)
        return obj

    def as_raw_string(self) -> bytes:
        """Return the payload of this object, without the header."""
        if self._raw is None:
            self._raw = self._serialize()
        return self._raw

    def __bytes__(self) -> bytes:
        return self.as_raw_string()

    def raw_length(self) -> int:
        """Returns the length of the raw string of this object."""
        return len(self.as_raw_string())

    def _header(self) -> bytes:
        return object_header(self.type_name, self.raw_length())

    def as_framed_string(self) -> bytes:
        """Return header and payload, the bytes the object's sha is taken of."""
        return self._header() + self.as_raw_string()

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return the object as it is stored in a loose object file."""
        return crypto.compress(self.as_framed_string(), compression_level)

    @property
    def id(self) -> ObjectID:
        """The hex SHA-1 naming this object."""
        if self._sha is None:
            self._sha = crypto.sha_hexdigest(self.as_framed_string())
        return self._sha

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Return true if the sha of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id

    def __ne__(self, other: object) -> bool:
        return not self == other


class Blob(ShaFile):
    """A Git Blob object."""

    type_name = "blob"

    def __init__(self, data: bytes = b"", repo: "Repo | None" = None) -> None:
        super().__init__(repo=repo)
        self._data = bytes(data)

    @classmethod
    def from_string(cls, data: bytes, repo: "Repo | None" = None) -> "Blob":
        """Create a blob from a string."""
        return cls(data, repo=repo)

    @property
    def data(self) -> bytes:
        """The contents of the blob."""
        return self._data

    def _deserialize(self, raw: bytes) -> None:
        self._data = bytes(raw)

    def _serialize(self) -> bytes:
        return self._data


class _MailMapObject(ShaFile):
    """Object whose payload is a header block followed by a message."""

    def __init__(self, headers: MailMap | None = None, repo: "Repo | None" = None) -> None:
        super().__init__(repo=repo)
        if headers is None:
            headers = {MESSAGE_KEY: ""}
        self._headers = dict(headers)
        if self._headers and MESSAGE_KEY in self._headers:
            # Keep the message last so iteration order matches the payload.
            self._headers[MESSAGE_KEY] = self._headers.pop(MESSAGE_KEY)

    def _deserialize(self, raw: bytes) -> None:
        self._headers = parse_mail_map(raw)

    def _serialize(self) -> bytes:
        return format_mail_map(self._headers)

    @property
    def headers(self) -> MailMap:
        """Copy of the headers; the message is stored under ``""``."""
        return dict(self._headers)

    def _get_header(self, name: str) -> str | None:
        return self._headers.get(name)

    @property
    def message(self) -> str | None:
        return self._headers.get(MESSAGE_KEY)


class Commit(_MailMapObject):
    """A git commit object."""

    type_name = "commit"

    @property
    def tree(self) -> ObjectID | None:
        """Tree that is the state of this commit."""
        return self._get_header(_TREE_HEADER)

    @property
    def parent(self) -> ObjectID | None:
        """First parent of this commit, or None for a root commit.

        Only the first ``parent`` header is kept when parsing.
        """
        return self._get_header(_PARENT_HEADER)

    @property
    def author(self) -> str | None:
        return self._get_header(_AUTHOR_HEADER)

    @property
    def committer(self) -> str | None:
        return self._get_header(_COMMITTER_HEADER)

    @property
    def gpgsig(self) -> str | None:
        """The ASCII-armored signature, if the commit is signed."""
        return self._get_header(_GPGSIG_HEADER)


class Tag(_MailMapObject):
    """A Git Tag object."""

    type_name = "tag"

    @property
    def object(self) -> ObjectID | None:
        """Sha of the object pointed to by this tag."""
        return self._get_header(_OBJECT_HEADER)

    @property
    def object_type(self) -> str | None:
        """Type name of the object pointed to by this tag."""
        return self._get_header(_TYPE_HEADER)

    @property
    def name(self) -> str | None:
        return self._get_header(_TAG_HEADER)

    @property
    def tagger(self) -> str | None:
        return self._get_header(_TAGGER_HEADER)


class Tree(ShaFile):
    """A Git tree object.

    A tree maps paths to the hashes of blobs (files), other trees
    (directories) or commits (submodules).
    """

    type_name = "tree"

    def __init__(
        self, entries: Iterable[TreeEntry] = (), repo: "Repo | None" = None
    ) -> None:
        super().__init__(repo=repo)
        self._entries = list(entries)

    def _deserialize(self, raw: bytes) -> None:
        self._entries = parse_tree(raw)

    def _serialize(self) -> bytes:
        return serialize_tree(self._entries)

    def entries(self) -> list[TreeEntry]:
        """Return the entries, in the order they are stored."""
        return list(self._entries)

    def __iter__(self) -> Iterator[TreeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return any(entry.path == path for entry in self._entries)

    def __getitem__(self, path: str) -> TreeEntry:
        for entry in self._entries:
            if entry.path == path:
                return entry
        raise KeyError(path)

    def check(self) -> None:
        """Check that the entries are in canonical order without duplicates.

        Parsing and serializing never enforce this; it is up to callers that
        need hashes compatible with other implementations.

        Raises:
          ObjectFormatException: if entries are unsorted or duplicated
        """
        last = None
        seen = set()
        for entry in self._entries:
            if entry.path in seen:
                raise ObjectFormatException(f"duplicate entry {entry.path!r}")
            seen.add(entry.path)
            if last is not None and key_entry(last) > key_entry(entry):
                raise ObjectFormatException("entries not sorted")
            last = entry

    def as_pretty_string(self) -> str:
        return "".join(pretty_format_tree_entry(entry) for entry in self._entries)


OBJECT_CLASSES: tuple[type[ShaFile], ...] = (
    Commit,
    Tree,
    Blob,
    Tag,
)

_TYPE_MAP: dict[str, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}
