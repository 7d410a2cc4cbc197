# test_repository.py -- tests for repository.py
# Copyright (C) 2007 James Westby <jw+debian@jameswestby.net>
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

"""Tests for the repository."""

import os
import shutil

from gitcore.errors import NotGitRepository, ObjectMissing, WrongObjectType
from gitcore.object_store import write_object
from gitcore.objects import Blob
from gitcore.repo import Repo

from . import TestCase


class CreateRepositoryTests(TestCase):
    def test_init(self) -> None:
        tmp_dir = self.make_temp_dir()
        repo = Repo.init(tmp_dir)
        self.assertFalse(repo.bare)
        self.assertEqual(tmp_dir, repo.path)
        self.assertEqual(os.path.join(tmp_dir, ".git"), repo.controldir())
        self.assertTrue(os.path.isdir(os.path.join(tmp_dir, ".git", "objects", "info")))
        self.assertEqual(b"false", repo.get_config().get(("core",), "bare"))

    def test_init_bare(self) -> None:
        tmp_dir = self.make_temp_dir()
        repo = Repo.init_bare(tmp_dir)
        self.assertTrue(repo.bare)
        self.assertEqual(tmp_dir, repo.controldir())
        self.assertTrue(os.path.isdir(os.path.join(tmp_dir, "objects")))
        self.assertEqual(b"true", repo.get_config().get(("core",), "bare"))
        self.assertEqual(b"0", repo.get_config().get(("core",), "repositoryformatversion"))

    def test_init_mkdir(self) -> None:
        path = os.path.join(self.make_temp_dir(), "new")
        repo = Repo.init(path, mkdir=True)
        self.assertTrue(os.path.isdir(os.path.join(path, ".git")))
        self.assertEqual(path, repo.path)

    def test_init_existing(self) -> None:
        tmp_dir = self.make_temp_dir()
        Repo.init(tmp_dir)
        self.assertRaises(FileExistsError, Repo.init, tmp_dir)

    def test_repr(self) -> None:
        tmp_dir = self.make_temp_dir()
        self.assertEqual(f"<Repo at {tmp_dir!r}>", repr(Repo.init_bare(tmp_dir)))


class OpenRepositoryTests(TestCase):
    def test_not_a_repository(self) -> None:
        self.assertRaises(NotGitRepository, Repo, self.make_temp_dir())

    def test_open(self) -> None:
        tmp_dir = self.make_temp_dir()
        Repo.init(tmp_dir)
        repo = Repo(tmp_dir)
        self.assertFalse(repo.bare)

    def test_missing_config(self) -> None:
        tmp_dir = self.make_temp_dir()
        os.mkdir(os.path.join(tmp_dir, "objects"))
        repo = Repo(tmp_dir)
        config = repo.get_config()
        self.assertEqual(os.path.join(tmp_dir, "config"), config.path)
        self.assertEqual([], list(config.sections()))

    def test_config_applies_to_store(self) -> None:
        tmp_dir = self.make_temp_dir()
        repo = Repo.init_bare(tmp_dir)
        config = repo.get_config()
        config.set(("core",), "looseCompression", "0")
        config.write_to_path()
        self.assertEqual(0, Repo(tmp_dir).object_store.loose_compression_level)

    def test_discover(self) -> None:
        tmp_dir = self.make_temp_dir()
        Repo.init(tmp_dir)
        subdir = os.path.join(tmp_dir, "a", "b")
        os.makedirs(subdir)
        repo = Repo.discover(subdir)
        self.assertEqual(os.path.abspath(tmp_dir), os.path.abspath(repo.path))

    def test_discover_not_found(self) -> None:
        self.assertRaises(NotGitRepository, Repo.discover, self.make_temp_dir())


class RepositoryObjectTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = Repo.init(self.make_temp_dir())

    def test_repo_file(self) -> None:
        self.assertEqual(
            os.path.join(self.repo.controldir(), "refs", "heads", "master"),
            self.repo.repo_file("refs", "heads", "master"),
        )
        self.assertFalse(os.path.exists(os.path.join(self.repo.controldir(), "refs")))

    def test_repo_file_mkdir(self) -> None:
        path = self.repo.repo_file("refs", "heads", "master", mkdir=True)
        self.assertTrue(os.path.isdir(os.path.dirname(path)))
        self.assertFalse(os.path.exists(path))

    def test_get_object(self) -> None:
        sha = write_object(Blob(b"contents", repo=self.repo))
        obj = self.repo.get_object(sha)
        self.assertEqual(b"contents", obj.data)
        self.assertIs(self.repo, obj.repo)
        self.assertEqual(obj, self.repo[sha])
        self.assertIn(sha, self.repo)

    def test_get_object_type(self) -> None:
        sha = write_object(Blob(b"contents", repo=self.repo))
        self.assertRaises(WrongObjectType, self.repo.get_object, sha, "tree")

    def test_get_missing(self) -> None:
        self.assertRaises(ObjectMissing, self.repo.get_object, "1" * 40)
        self.assertRaises(KeyError, self.repo.__getitem__, "1" * 40)
        self.assertNotIn("1" * 40, self.repo)

    def test_find_object(self) -> None:
        sha = write_object(Blob(b"contents", repo=self.repo))
        self.assertEqual(sha, self.repo.find_object(sha))
        self.assertEqual(sha, self.repo.find_object(sha.upper()))
        self.assertEqual(sha, self.repo.find_object(sha[:7]))
        self.assertEqual(sha, self.repo.find_object(sha[:4]))

    def test_find_object_too_short(self) -> None:
        sha = write_object(Blob(b"contents", repo=self.repo))
        self.assertRaises(ValueError, self.repo.find_object, sha[:3])

    def test_find_object_not_hex(self) -> None:
        self.assertRaises(ValueError, self.repo.find_object, "master")

    def test_find_object_not_plain_hex(self) -> None:
        for name in ("0xab12", "ab_12", " ab12", "ab12\n", "+ab12"):
            self.assertRaises(ValueError, self.repo.find_object, name)

    def test_find_object_missing(self) -> None:
        self.assertRaises(ObjectMissing, self.repo.find_object, "1" * 40)
        self.assertRaises(ObjectMissing, self.repo.find_object, "1111")

    def test_find_object_ambiguous(self) -> None:
        store = self.repo.object_store
        first = store.add_object(Blob(b"contents"))
        # Craft a second object file sharing the first object's prefix.
        twin = first[:-1] + ("0" if first[-1] != "0" else "1")
        shutil.copyfile(
            os.path.join(store.path, first[:2], first[2:]),
            os.path.join(store.path, twin[:2], twin[2:]),
        )
        self.assertRaises(KeyError, self.repo.find_object, first[:10])
