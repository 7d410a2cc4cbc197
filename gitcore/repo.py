# repo.py -- For dealing with git repositories.
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

"""Repository context for the object layer.

This only knows where the control directory and the object store are; refs,
the index and the working tree are not handled here.
"""

__all__ = [
    "CONTROLDIR",
    "OBJECTDIR",
    "Repo",
]

import os
import string

from . import log_utils
from .config import ConfigFile
from .errors import NotGitRepository, ObjectMissing
from .file import ensure_dir_exists
from .object_store import DiskObjectStore, valid_hexsha
from .objects import ObjectID, ShaFile

logger = log_utils.getLogger(__name__)

CONTROLDIR = ".git"
OBJECTDIR = "objects"
CONFIG_FILENAME = "config"

# Shortest abbreviated sha find_object accepts
MIN_ABBREV = 4


class Repo:
    """A git repository backed by local disk.

    To open an existing repository, call the constructor with the path of the
    repository. To create a new repository, use ``Repo.init`` or
    ``Repo.init_bare``.

    Attributes:
      path: Path to the working copy (if it exists) or repository control
        directory (if the repository is bare)
      bare: Whether this is a bare repository
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Open a repository on disk.

        Raises:
          NotGitRepository: if root is neither a working tree nor a bare
            repository
        """
        root = os.fspath(root)
        hidden_path = os.path.join(root, CONTROLDIR)
        if os.path.isdir(os.path.join(hidden_path, OBJECTDIR)):
            self.bare = False
            self._controldir = hidden_path
        elif os.path.isdir(os.path.join(root, OBJECTDIR)):
            self.bare = True
            self._controldir = root
        else:
            raise NotGitRepository(f"No git repository was found at {root}")
        self.path = root
        self.object_store = DiskObjectStore.from_config(
            os.path.join(self._controldir, OBJECTDIR), self.get_config()
        )

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    @classmethod
    def _init_maybe_bare(cls, path: str, controldir: str) -> "Repo":
        DiskObjectStore.init(os.path.join(controldir, OBJECTDIR))
        config = ConfigFile()
        config.set(("core",), "repositoryformatversion", "0")
        config.set(("core",), "bare", controldir == path)
        config.write_to_path(os.path.join(controldir, CONFIG_FILENAME))
        logger.debug("initialized repository in %s", controldir)
        return cls(path)

    @classmethod
    def init(cls, path: str | os.PathLike[str], *, mkdir: bool = False) -> "Repo":
        """Create a new repository with a working tree.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
        """
        path = os.fspath(path)
        if mkdir:
            os.mkdir(path)
        controldir = os.path.join(path, CONTROLDIR)
        os.mkdir(controldir)
        return cls._init_maybe_bare(path, controldir)

    @classmethod
    def init_bare(cls, path: str | os.PathLike[str], *, mkdir: bool = False) -> "Repo":
        """Create a new bare repository."""
        path = os.fspath(path)
        if mkdir:
            os.mkdir(path)
        return cls._init_maybe_bare(path, path)

    @classmethod
    def discover(cls, start: str | os.PathLike[str] = ".") -> "Repo":
        """Iterate parent directories to discover a repository.

        Return a Repo object for the first parent directory that looks like a
        Git repository.
        """
        path = os.path.abspath(start)
        while True:
            try:
                return cls(path)
            except NotGitRepository:
                new_path, _tail = os.path.split(path)
                if new_path == path:  # Root reached
                    break
                path = new_path
        raise NotGitRepository(f"No git repository was found at {os.fspath(start)}")

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def repo_file(self, *parts: str, mkdir: bool = False) -> str:
        """Compute a path inside the control directory.

        Args:
          parts: path components relative to the control directory
          mkdir: create the parent directories of the path if missing
        """
        path = os.path.join(self._controldir, *parts)
        if mkdir:
            ensure_dir_exists(os.path.dirname(path))
        return path

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.git/config`` file.
        """
        path = os.path.join(self._controldir, CONFIG_FILENAME)
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = ConfigFile()
            ret.path = path
            return ret

    def get_object(self, sha: ObjectID, type_name: str | None = None) -> ShaFile:
        """Retrieve the object with the specified SHA.

        Args:
          sha: hex SHA to retrieve
          type_name: if given, the type the object must have
        Returns: A ShaFile object
        Raises:
          ObjectMissing: if the object was not found
          WrongObjectType: if the object is not of type ``type_name``
        """
        return self.object_store.read_object(sha, type_name=type_name, repo=self)

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        return self.get_object(sha)

    def __contains__(self, sha: object) -> bool:
        return sha in self.object_store

    def find_object(self, name: str) -> ObjectID:
        """Resolve a full or abbreviated hex sha to a full one.

        Raises:
          ObjectMissing: if no object matches
          KeyError: if an abbreviated sha matches more than one object
          ValueError: if name is not a hex string of usable length
        """
        if valid_hexsha(name):
            sha = name.lower()
            if sha not in self.object_store:
                raise ObjectMissing(sha)
            return sha
        if not all(c in string.hexdigits for c in name):
            raise ValueError(f"not a hex sha: {name!r}")
        if len(name) < MIN_ABBREV:
            raise ValueError(f"abbreviated sha too short: {name!r}")
        matches = list(self.object_store.iter_prefix(name))
        if not matches:
            raise ObjectMissing(name)
        if len(matches) > 1:
            raise KeyError(f"ambiguous object name {name!r}")
        return matches[0]
