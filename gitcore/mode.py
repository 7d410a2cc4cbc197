# mode.py -- File modes of tree entries
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

"""File modes that can appear in a tree entry.

Git writes modes in trees as the ASCII digits of an octal number, without a
leading zero. The enumeration values below are those digit strings read as
decimal integers, so ``int(mode)`` formats back to exactly what git writes.
"""

__all__ = [
    "Mode",
    "S_IFGITLINK",
    "S_ISGITLINK",
]

import stat
from enum import IntEnum

from .errors import UnknownMode

S_IFGITLINK = 0o160000


def S_ISGITLINK(m: int) -> bool:
    """Check if a mode indicates a submodule.

    Args:
      m: Mode to check
    Returns: a ``boolean``
    """
    return stat.S_IFMT(m) == S_IFGITLINK


class Mode(IntEnum):
    """Kind of filesystem entry a tree entry points at."""

    FILE = 100644
    EXECUTABLE = 100755
    SYMLINK = 120000
    GITLINK = 160000
    DIRECTORY = 40000

    @classmethod
    def from_int(cls, value: int) -> "Mode":
        """Look up the mode for an integer read from a tree.

        Raises:
          UnknownMode: if value is not one of the known modes
        """
        try:
            return cls(value)
        except ValueError as exc:
            raise UnknownMode(value) from exc

    @classmethod
    def from_stat_mode(cls, st_mode: int) -> "Mode":
        """Pick the mode git would record for a file with these stat bits."""
        if stat.S_ISLNK(st_mode):
            return cls.SYMLINK
        if stat.S_ISDIR(st_mode):
            return cls.DIRECTORY
        if S_ISGITLINK(st_mode):
            return cls.GITLINK
        if st_mode & 0o111:
            return cls.EXECUTABLE
        return cls.FILE

    @property
    def stat_mode(self) -> int:
        """The mode as ``os.stat`` style bits."""
        return int(str(self.value), 8)

    @property
    def is_dir(self) -> bool:
        return self is Mode.DIRECTORY

    @property
    def object_type(self) -> str:
        """Type name of the object an entry with this mode points at."""
        if self is Mode.DIRECTORY:
            return "tree"
        if self is Mode.GITLINK:
            return "commit"
        return "blob"

    def __str__(self) -> str:
        return str(self.value)
