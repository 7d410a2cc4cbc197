# object_store.py -- Object store for git objects
# Copyright (C) 2008-2013 Jelmer Vernooij <jelmer@jelmer.uk>
#                         and others
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

"""Loose object storage.

Each object lives in its own zlib-compressed file. The path of an object is
derived from its hex sha: the first two characters name a fan-out directory
and the remaining 38 the file, so the object
``e673d1b7eaa0aa01b5bc2442d570a765bdaae751`` is stored in
``objects/e6/73d1b7eaa0aa01b5bc2442d570a765bdaae751``.
"""

__all__ = [
    "INFODIR",
    "LOOSE_OBJECT_MODE",
    "DiskObjectStore",
    "filename_to_hex",
    "hex_to_filename",
    "read_object",
    "valid_hexsha",
    "write_object",
]

import binascii
import os
from collections.abc import Iterator
from typing import TYPE_CHECKING

from . import crypto, log_utils
from .errors import CorruptObject, ObjectMissing, WrongObjectType
from .file import FileLocked, GitFile, ensure_dir_exists
from .objects import ObjectID, ShaFile, object_class, parse_object_header

if TYPE_CHECKING:
    from .config import ConfigFile
    from .repo import Repo

logger = log_utils.getLogger(__name__)

INFODIR = "info"
LOOSE_OBJECT_MODE = 0o444


def valid_hexsha(hex: str) -> bool:
    """Check whether a string is a full lowercase or uppercase hex sha."""
    if len(hex) != crypto.HEX_LENGTH:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error, ValueError):
        return False
    else:
        return True


def hex_to_filename(path: str | os.PathLike[str], hex: str) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    return os.path.join(path, hex[:2], hex[2:])


def filename_to_hex(filename: str) -> ObjectID:
    """Takes an object filename and returns its corresponding hex sha.

    Raises:
      ValueError: if the filename does not name a loose object
    """
    # grab the last (up to) two path components
    names = filename.rsplit(os.path.sep, 2)[-2:]
    errmsg = f"Invalid object filename: {filename}"
    if len(names) != 2:
        raise ValueError(errmsg)
    base, rest = names
    if len(base) != 2 or len(rest) != crypto.HEX_LENGTH - 2 or not valid_hexsha(base + rest):
        raise ValueError(errmsg)
    return base + rest


def _check_size(sha: ObjectID, declared: int, actual: int) -> None:
    if declared != actual:
        raise CorruptObject(
            f"size does not match size of raw data: {declared} != {actual}", sha=sha
        )


class DiskObjectStore:
    """Git-style loose object store that exists on disk."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
        file_mode: int | None = None,
        dir_mode: int | None = None,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          loose_compression_level: zlib compression level for loose objects
          fsync_object_files: whether to fsync object files for durability
          file_mode: File permission mask for new objects
          dir_mode: Directory permission mask for new fan-out directories
        """
        self.path = os.fspath(path)
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files
        self.file_mode = file_mode
        self.dir_mode = dir_mode

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def from_config(
        cls, path: str | os.PathLike[str], config: "ConfigFile"
    ) -> "DiskObjectStore":
        """Create a DiskObjectStore from a configuration object.

        Reads ``core.compression``, ``core.looseCompression`` and
        ``core.fsyncObjectFiles``.
        """
        default_compression_level = config.get_int(("core",), "compression", -1)
        loose_compression_level = config.get_int(
            ("core",), "looseCompression", default_compression_level
        )
        fsync_object_files = config.get_boolean(("core",), "fsyncObjectFiles", False)
        return cls(
            path,
            loose_compression_level=loose_compression_level,
            fsync_object_files=bool(fsync_object_files),
        )

    @classmethod
    def init(
        cls, path: str | os.PathLike[str], *, dir_mode: int | None = None
    ) -> "DiskObjectStore":
        """Create the directory layout of a new object store."""
        ensure_dir_exists(path, dir_mode)
        ensure_dir_exists(os.path.join(path, INFODIR), dir_mode)
        return cls(path, dir_mode=dir_mode)

    def _get_shafile_path(self, sha: ObjectID) -> str:
        if not valid_hexsha(sha):
            raise ValueError(f"invalid object id {sha!r}")
        return hex_to_filename(self.path, sha.lower())

    def contains_loose(self, sha: ObjectID) -> bool:
        """Check if a particular object is present by SHA1 and is loose."""
        return os.path.isfile(self._get_shafile_path(sha))

    def __contains__(self, sha: object) -> bool:
        return isinstance(sha, str) and valid_hexsha(sha) and self.contains_loose(sha)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs of all loose objects."""
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                sha = base + rest
                if valid_hexsha(sha):
                    yield sha

    def iter_prefix(self, prefix: str) -> Iterator[ObjectID]:
        """Iterate over all object SHAs with the given hex prefix."""
        prefix = prefix.lower()
        if len(prefix) < 2:
            for sha in self:
                if sha.startswith(prefix):
                    yield sha
            return
        dir = prefix[:2]
        rest = prefix[2:]
        try:
            names = sorted(os.listdir(os.path.join(self.path, dir)))
        except FileNotFoundError:
            return
        for name in names:
            if name.startswith(rest) and valid_hexsha(dir + name):
                yield dir + name

    def _load_frame(self, sha: ObjectID) -> tuple[str, int, bytes, int]:
        path = self._get_shafile_path(sha)
        try:
            with GitFile(path, "rb") as f:
                compressed = f.read()
        except FileNotFoundError as exc:
            raise ObjectMissing(sha) from exc
        try:
            raw = crypto.decompress(compressed)
            type_name, size, offset = parse_object_header(raw)
        except CorruptObject as exc:
            raise CorruptObject(str(exc), sha=sha) from exc
        return type_name, size, raw, offset

    def get_raw(self, sha: ObjectID) -> tuple[str, bytes]:
        """Obtain the type name and payload of an object.

        Args:
          sha: hex sha of the object
        Returns: tuple with type name and payload
        Raises:
          ObjectMissing: if there is no such object
          CorruptObject: if the object file can not be decoded
        """
        type_name, size, raw, offset = self._load_frame(sha)
        _check_size(sha, size, len(raw) - offset)
        return type_name, raw[offset:]

    def read_object(
        self,
        sha: ObjectID,
        type_name: str | None = None,
        repo: "Repo | None" = None,
    ) -> ShaFile:
        """Read an object and decode it according to its type.

        Args:
          sha: hex sha of the object
          type_name: if given, the type the object must have
          repo: repository the returned object belongs to
        Raises:
          ObjectMissing: if there is no such object
          CorruptObject: if the framing is broken
          WrongObjectType: if the object is not of type ``type_name``
          UnsupportedObjectType: if the stored type is unknown
        """
        actual_type, size, raw, offset = self._load_frame(sha)
        if type_name is not None and actual_type != type_name:
            raise WrongObjectType(sha, type_name, actual_type)
        _check_size(sha, size, len(raw) - offset)
        cls = object_class(actual_type)
        logger.debug("read %s %s (%d bytes)", actual_type, sha, size)
        obj = cls.from_raw_string(raw[offset:], repo=repo)
        obj._sha = sha.lower()
        return obj

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        return self.read_object(sha)

    def add_object(self, obj: ShaFile, dry_run: bool = False) -> ObjectID:
        """Add a single object to this object store.

        Args:
          obj: Object to add
          dry_run: only compute the sha, do not write anything
        Returns: hex sha of the object
        Raises:
          FileLocked: if a stale lock file blocks the write and the object
            is still absent
        """
        sha = obj.id
        if dry_run:
            return sha
        path = self._get_shafile_path(sha)
        ensure_dir_exists(os.path.dirname(path), self.dir_mode)
        if os.path.exists(path):
            logger.debug("object %s already present", sha)
            return sha
        mask = self.file_mode if self.file_mode is not None else LOOSE_OBJECT_MODE
        try:
            with GitFile(path, "wb", mask=mask, fsync=self.fsync_object_files) as f:
                f.write(obj.as_legacy_object(self.loose_compression_level))
        except FileLocked:
            if not os.path.exists(path):
                raise
            logger.debug("object %s written concurrently", sha)
            return sha
        logger.debug("wrote %s %s", obj.type_name, sha)
        return sha

    def delete_loose_object(self, sha: ObjectID) -> None:
        """Delete a loose object from disk.

        Raises:
          ObjectMissing: If the object file doesn't exist
        """
        try:
            os.remove(self._get_shafile_path(sha))
        except FileNotFoundError as exc:
            raise ObjectMissing(sha) from exc


def read_object(repo: "Repo", sha: ObjectID, type_name: str | None = None) -> ShaFile:
    """Read an object from a repository.

    See ``DiskObjectStore.read_object``.
    """
    return repo.object_store.read_object(sha, type_name=type_name, repo=repo)


def write_object(obj: ShaFile, dry_run: bool = False) -> ObjectID:
    """Write an object to the repository it belongs to.

    The sha is computed and returned even for a dry run, in which case the
    object does not need a repository.

    Raises:
      ValueError: if the object has no repository and dry_run is False
    """
    if dry_run:
        return obj.id
    if obj.repo is None:
        raise ValueError(f"{obj!r} does not belong to a repository")
    return obj.repo.object_store.add_object(obj)
