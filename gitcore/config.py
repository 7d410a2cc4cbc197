# config.py -- Reading and writing the repository configuration
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

"""Reading and writing the repository configuration file.

gitcore only looks at a few ``core`` settings, so only the common part of
git's config syntax is handled: ``[section]``, ``[section "sub"]`` and
``[section.sub]`` headers, ``name = value`` settings (a bare ``name`` means
true), double-quoted values with backslash escapes, ``#`` and ``;``
comments, and backslash line continuations. Include directives are not
followed.

Section and variable names are case-insensitive; subsection names are not.
"""

__all__ = [
    "ConfigFile",
]

import os
import string
from collections.abc import Iterator
from typing import IO

from . import log_utils
from .file import GitFile, LockedFile

logger = log_utils.getLogger(__name__)

Section = tuple[bytes, ...]
SectionLike = bytes | str | tuple[bytes | str, ...]

_SECTION_CHARS = frozenset((string.ascii_letters + string.digits + "-.").encode())
_NAME_CHARS = frozenset((string.ascii_letters + string.digits + "-").encode())

_UNESCAPE = {b"n": b"\n", b"t": b"\t", b"b": b"\b", b"\\": b"\\", b'"': b'"'}

_TRUE = (b"true", b"yes", b"on", b"1")
_FALSE = (b"false", b"no", b"off", b"0", b"")


def _fold(section: Section) -> Section:
    return (section[0].lower(), *section[1:])


def _unquote(raw: bytes) -> bytes:
    """Decode the right hand side of a setting.

    Quotes are removed, escapes resolved, an unquoted comment dropped and
    unquoted whitespace at either end stripped.

    Raises:
      ValueError: on an unknown escape or an unbalanced quote
    """
    raw = raw.strip(b" \t")
    out = bytearray()
    held = b""
    quoted = False
    i = 0
    while i < len(raw):
        c = raw[i : i + 1]
        i += 1
        if c == b"\\":
            try:
                out += held + _UNESCAPE[raw[i : i + 1]]
            except KeyError as exc:
                raise ValueError(f"invalid escape in value {raw!r}") from exc
            held = b""
            i += 1
        elif c == b'"':
            quoted = not quoted
        elif not quoted and c in (b"#", b";"):
            break
        elif not quoted and c in (b" ", b"\t"):
            # Only kept if something other than whitespace follows.
            held += c
        else:
            out += held + c
            held = b""
    if quoted:
        raise ValueError(f"missing end quote in value {raw!r}")
    return bytes(out)


def _quote(value: bytes) -> bytes:
    escaped = (
        value.replace(b"\\", b"\\\\")
        .replace(b'"', b'\\"')
        .replace(b"\n", b"\\n")
        .replace(b"\t", b"\\t")
    )
    if value != value.strip(b" ") or b"#" in value or b";" in value:
        return b'"' + escaped + b'"'
    return escaped


def _continues(raw: bytes) -> bool:
    # An odd number of trailing backslashes escapes the newline.
    return (len(raw) - len(raw.rstrip(b"\\"))) % 2 == 1


def _parse_header(line: bytes) -> tuple[Section, bytes]:
    """Parse a section header.

    Returns: the section and the text following the closing bracket
    Raises:
      ValueError: if the header is malformed
    """
    end = 1
    while end < len(line) and line[end : end + 1] not in (b" ", b"]"):
        end += 1
    name = line[1:end]
    rest = line[end:].lstrip(b" ")
    section: Section
    if end < len(line) and line[end : end + 1] == b" ":
        if rest[:1] != b'"':
            raise ValueError(f"invalid section header {line!r}")
        close = rest.find(b'"]', 1)
        while close != -1 and _continues(rest[1:close]):
            close = rest.find(b'"]', close + 1)
        if close == -1:
            raise ValueError(f"unterminated subsection in {line!r}")
        sub = rest[1:close].replace(b'\\"', b'"').replace(b"\\\\", b"\\")
        section = (name, sub)
        rest = rest[close + 2 :]
    elif rest[:1] == b"]":
        base, dot, sub = name.partition(b".")
        section = (base, sub) if dot else (base,)
        rest = rest[1:]
    else:
        raise ValueError(f"expected trailing ] in {line!r}")
    if not section[0] or not _SECTION_CHARS.issuperset(section[0]):
        raise ValueError(f"invalid section name {section[0]!r}")
    return section, rest


class ConfigFile:
    """A git configuration file, like ``.git/config``.

    Sections and the settings inside them keep the order in which they were
    read or first set.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.path: str | None = None
        # folded section -> (section as written, {folded name: (name, value)})
        self._sections: dict[
            Section, tuple[Section, dict[bytes, tuple[bytes, bytes]]]
        ] = {}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self.path!r}>"

    def _encode(self, value: bytes | str) -> bytes:
        return value if isinstance(value, bytes) else value.encode(self.encoding)

    def _section_key(self, section: SectionLike) -> Section:
        if not isinstance(section, tuple):
            section = (section,)
        return _fold(tuple(self._encode(part) for part in section))

    def _settings(self, section: Section) -> dict[bytes, tuple[bytes, bytes]]:
        return self._sections.setdefault(_fold(section), (section, {}))[1]

    def sections(self) -> Iterator[Section]:
        """Iterate over the sections, as they were written."""
        return (written for written, _ in self._sections.values())

    def get(self, section: SectionLike, name: bytes | str) -> bytes:
        """Look up a setting.

        Raises:
          KeyError: if the setting is not present
        """
        key = self._section_key(section)
        return self._sections[key][1][self._encode(name).lower()][1]

    def get_boolean(
        self, section: SectionLike, name: bytes | str, default: bool | None = None
    ) -> bool | None:
        """Look up a setting and interpret it as git does a boolean.

        Raises:
          ValueError: if the setting is present but is not a boolean
        """
        try:
            value = self.get(section, name).lower()
        except KeyError:
            return default
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def get_int(
        self, section: SectionLike, name: bytes | str, default: int | None = None
    ) -> int | None:
        """Look up a setting and interpret it as an integer.

        Raises:
          ValueError: if the setting is present but is not an integer
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"not a valid integer: {value!r}") from exc

    def set(
        self, section: SectionLike, name: bytes | str, value: bytes | str | bool
    ) -> None:
        """Set a value, replacing any earlier value for the same name."""
        if not isinstance(section, tuple):
            section = (section,)
        written = tuple(self._encode(part) for part in section)
        if isinstance(value, bool):
            value = b"true" if value else b"false"
        name = self._encode(name)
        self._settings(written)[name.lower()] = (name, self._encode(value))

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Parse a configuration from a binary file object.

        Raises:
          ValueError: if the contents are not a valid configuration
        """
        ret = cls()
        data = f.read()
        if data.startswith(b"\xef\xbb\xbf"):
            data = data[3:]
        lines = iter(data.splitlines())
        section: Section | None = None
        for line in lines:
            line = line.strip()
            if line[:1] == b"[":
                section, line = _parse_header(line)
                ret._settings(section)
                line = line.strip()
            if line[:1] in (b"", b"#", b";"):
                continue
            if section is None:
                raise ValueError(f"setting {line!r} outside of a section")
            name, eq, raw = line.partition(b"=")
            name = name.strip() if eq else _unquote(name)
            if not name or not _NAME_CHARS.issuperset(name):
                raise ValueError(f"invalid variable name {name!r}")
            if not eq:
                raw = b"true"
            while _continues(raw):
                try:
                    raw = raw[:-1] + next(lines)
                except StopIteration as exc:
                    raise ValueError(f"unterminated value for {name!r}") from exc
            ret._settings(section)[name.lower()] = (name, _unquote(raw))
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read a configuration file from disk."""
        with GitFile(path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = os.fspath(path)
        logger.debug("read configuration from %s", ret.path)
        return ret

    def write_to_file(self, f: "IO[bytes] | LockedFile") -> None:
        """Serialize the configuration to a binary file object."""
        for section, settings in self._sections.values():
            if len(section) == 1:
                f.write(b"[" + section[0] + b"]\n")
            else:
                sub = section[1].replace(b"\\", b"\\\\").replace(b'"', b'\\"')
                f.write(b"[" + section[0] + b' "' + sub + b'"]\n')
            for name, value in settings.values():
                f.write(b"\t" + name + b" = " + _quote(value) + b"\n")

    def write_to_path(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write the configuration through a lock file.

        Args:
          path: where to write; defaults to the path it was read from
        Raises:
          ValueError: if no path is given and none is known
        """
        if path is None:
            path = self.path
        if path is None:
            raise ValueError("no path given for configuration file")
        with GitFile(path, "wb") as f:
            self.write_to_file(f)
