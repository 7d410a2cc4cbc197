# crypto.py -- Hashing and compression primitives for git objects
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

"""Hashing and compression primitives used for loose objects.

Loose objects are named by the SHA-1 of their framed contents and stored
zlib-compressed.
"""

__all__ = [
    "HEX_LENGTH",
    "OID_LENGTH",
    "ZERO_SHA",
    "compress",
    "decompress",
    "new_hash",
    "sha_hexdigest",
]

import zlib
from hashlib import sha1
from typing import TYPE_CHECKING

from .errors import CorruptObject

if TYPE_CHECKING:
    from _hashlib import HASH

OID_LENGTH = 20
HEX_LENGTH = 40
ZERO_SHA = "0" * HEX_LENGTH


def new_hash() -> "HASH":
    """Create a new hash object."""
    return sha1()


def sha_hexdigest(data: bytes) -> str:
    """Hash data and return the lowercase hexadecimal digest."""
    h = new_hash()
    h.update(data)
    return h.hexdigest()


def compress(data: bytes, level: int = -1) -> bytes:
    """Compress data with zlib.

    Args:
      data: Bytes to compress
      level: zlib compression level (-1 for the zlib default)
    """
    compobj = zlib.compressobj(level)
    return compobj.compress(data) + compobj.flush()


def decompress(data: bytes) -> bytes:
    """Decompress a complete zlib stream.

    Raises:
      CorruptObject: if the stream is malformed, truncated or followed by
        trailing bytes
    """
    dcomp = zlib.decompressobj()
    try:
        dcomped = dcomp.decompress(data)
        dcomped += dcomp.flush()
    except zlib.error as exc:
        raise CorruptObject(f"unable to decompress: {exc}") from exc
    if not dcomp.eof:
        raise CorruptObject("unexpected end of compressed data")
    if dcomp.unused_data:
        raise CorruptObject("trailing data after compressed stream")
    return dcomped
