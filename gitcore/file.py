# file.py -- Atomic replacement of repository files
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

"""Atomic replacement of repository files.

Writing ``name`` goes through ``name.lock``. The lock file is created
exclusively, filled, and renamed over ``name`` on ``close()``, so readers
see either the old contents or the new ones. If the lock file already
exists somebody else is writing, or crashed while writing, and
``FileLocked`` is raised.
"""

__all__ = [
    "LOCK_SUFFIX",
    "FileLocked",
    "GitFile",
    "LockedFile",
    "ensure_dir_exists",
]

import contextlib
import os
import warnings
from types import TracebackType
from typing import IO, Literal, overload

LOCK_SUFFIX = ".lock"


def ensure_dir_exists(
    dirname: str | os.PathLike[str], mode: int | None = None
) -> None:
    """Create a directory and any missing parents.

    Args:
      dirname: Directory to create
      mode: Permissions for dirname, applied only if it is created here
    """
    if os.path.isdir(dirname):
        return
    os.makedirs(dirname, exist_ok=True)
    if mode is not None:
        os.chmod(dirname, mode)


class FileLocked(Exception):
    """The lock file for a path is already present."""

    def __init__(self, filename: str, lockfilename: str) -> None:
        super().__init__(f"{filename} is locked: {lockfilename} exists")
        self.filename = filename
        self.lockfilename = lockfilename


class LockedFile:
    """Write-only file that replaces its target when closed.

    One of ``close()`` or ``abort()`` has to be called to release the lock.
    Leaving a ``with`` block closes the file, or aborts it if an exception
    is propagating.
    """

    def __init__(
        self, path: str | os.PathLike[str], mask: int = 0o644, fsync: bool = False
    ) -> None:
        self.path = os.fspath(path)
        self.lock_path = self.path + LOCK_SUFFIX
        self.fsync = fsync
        flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
        try:
            fd = os.open(self.lock_path, flags, mask)
        except FileExistsError as exc:
            raise FileLocked(self.path, self.lock_path) from exc
        self._file: IO[bytes] | None = os.fdopen(fd, "wb")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @property
    def closed(self) -> bool:
        return self._file is None

    def write(self, data: bytes) -> int:
        if self._file is None:
            raise ValueError(f"write to closed {self!r}")
        return self._file.write(data)

    def _detach(self) -> IO[bytes] | None:
        f, self._file = self._file, None
        return f

    def abort(self) -> None:
        """Discard what was written and release the lock.

        The target is left untouched. Does nothing once the file is closed.
        """
        f = self._detach()
        if f is None:
            return
        f.close()
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self.lock_path)

    def close(self) -> None:
        """Move the written data into place and release the lock.

        Raises:
          OSError: if the data could not be flushed or renamed; the lock file
            is removed and the target left untouched
        """
        f = self._detach()
        if f is None:
            return
        try:
            f.flush()
            if self.fsync:
                os.fsync(f.fileno())
            f.close()
            os.replace(self.lock_path, self.path)
        except OSError:
            f.close()
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self.lock_path)
            raise

    def __del__(self) -> None:
        if getattr(self, "_file", None) is not None:
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "LockedFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()


@overload
def GitFile(
    filename: str | os.PathLike[str],
    mode: Literal["rb"] = "rb",
    mask: int = 0o644,
    fsync: bool = False,
) -> IO[bytes]: ...


@overload
def GitFile(
    filename: str | os.PathLike[str],
    mode: Literal["wb"],
    mask: int = 0o644,
    fsync: bool = False,
) -> LockedFile: ...


def GitFile(
    filename: str | os.PathLike[str],
    mode: str = "rb",
    mask: int = 0o644,
    fsync: bool = False,
) -> IO[bytes] | LockedFile:
    """Open a repository file.

    Args:
      filename: Path to the file
      mode: ``"rb"`` for a plain read-only file, ``"wb"`` for a LockedFile
      mask: Permissions of a newly written file
      fsync: Whether a LockedFile is synced to disk before it is renamed
    Raises:
      OSError: for any other mode
      FileLocked: if the file is being written by someone else
    """
    if mode == "rb":
        return open(filename, "rb")
    if mode == "wb":
        return LockedFile(filename, mask=mask, fsync=fsync)
    raise OSError(f"unsupported mode for git files: {mode!r}")
