# errors.py -- errors for gitcore
# Copyright (C) 2007 James Westby <jw+debian@jameswestby.net>
# Copyright (C) 2009-2012 Jelmer Vernooij <jelmer@jelmer.uk>
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

"""Exception classes raised by the gitcore object layer."""

__all__ = [
    "CorruptObject",
    "FileFormatException",
    "InvalidEncoding",
    "MissingMessage",
    "NotGitRepository",
    "ObjectFormatException",
    "ObjectMissing",
    "UnknownMode",
    "UnsupportedObjectType",
    "WrongObjectException",
    "WrongObjectType",
]


class FileFormatException(Exception):
    """Base class for exceptions relating to reading git file formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class CorruptObject(ObjectFormatException):
    """An object's framing or payload is structurally broken.

    Raised for missing header delimiters, a declared size that does not match
    the payload, truncated tree records and unterminated header values.
    """

    def __init__(self, msg: str, sha: str | None = None) -> None:
        """Initialize a CorruptObject exception.

        Args:
            msg: Description of the problem.
            sha: Hex SHA of the object, if known.
        """
        self.sha = sha
        if sha is not None:
            msg = f"{sha}: {msg}"
        super().__init__(msg)


class InvalidEncoding(ObjectFormatException):
    """Bytes that must be text are not valid UTF-8."""

    def __init__(self, what: str, value: bytes) -> None:
        self.what = what
        self.value = value
        super().__init__(f"invalid encoding in {what}: {value!r}")


class UnsupportedObjectType(ObjectFormatException):
    """The type name in an object header is not one of the known types."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"unsupported type {type_name!r}")


class UnknownMode(ObjectFormatException, ValueError):
    """A tree entry mode is outside the fixed set of git modes."""

    def __init__(self, mode: int) -> None:
        self.mode = mode
        super().__init__(f"unknown file mode {mode}")


class MissingMessage(ObjectFormatException):
    """A mail map was serialized without its message entry."""

    def __init__(self) -> None:
        super().__init__("mail map has no message entry")


class WrongObjectException(Exception):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: str) -> None:
        """Initialize a WrongObjectException.

        Args:
            sha: The SHA of the object that was not of the expected type.
        """
        self.sha = sha
        Exception.__init__(self, f"{sha} is not a {self.type_name}")


class WrongObjectType(WrongObjectException):
    """The stored object type differs from the type the caller asked for."""

    def __init__(self, sha: str, expected_type: str, actual_type: str) -> None:
        """Initialize a WrongObjectType exception.

        Args:
            sha: The SHA of the object.
            expected_type: The type name the caller requested.
            actual_type: The type name found in the object header.
        """
        self.type_name = expected_type
        self.expected_type = expected_type
        self.actual_type = actual_type
        super().__init__(sha)


class ObjectMissing(KeyError):
    """Indicates that a requested object is missing."""

    def __init__(self, sha: str) -> None:
        """Initialize an ObjectMissing exception.

        Args:
            sha: The SHA of the missing object.
        """
        self.sha = sha
        super().__init__(sha)

    def __str__(self) -> str:
        return f"object not found {self.sha}"


class NotGitRepository(Exception):
    """Indicates that no Git repository was found."""
