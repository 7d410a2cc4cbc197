# mailmap.py -- Header and message format of commit and tag objects
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

"""Parsing and formatting of the header block used by commits and tags.

The format is a simplified version of RFC 2822 mail messages. It begins with a
series of ``key value`` lines. A value may span several lines, in which case
every continuation line starts with a single space that is not part of the
value. A blank line ends the headers and the rest of the payload is a free
form message.

A commit looks like this::

    tree 8d7a53339121fd3a565b6f46eb0df7a20dc608a1
    parent 390a277f5f3798af70c1895fa54bcaa6ce8e448e
    author Jane Doe <jane@example.com> 1654631458 -0700
    committer Jane Doe <jane@example.com> 1654631458 -0700
    gpgsig -----BEGIN PGP SIGNATURE-----

     iQIzBAABCAAdFiEEsjQ114tLOZFScJjMAczt3vehvxQFAmKfrCIACgkQAczt3veh
     =Pifs
     -----END PGP SIGNATURE-----

    update readme

and is represented as a dict in which the message is stored under the empty
string key.
"""

__all__ = [
    "MESSAGE_KEY",
    "MailMap",
    "format_mail_map",
    "parse_mail_map",
]

from .errors import CorruptObject, InvalidEncoding, MissingMessage

# Insertion order is significant: it is the order headers are written in.
MailMap = dict[str, str]

MESSAGE_KEY = ""


def _decode(value: bytes, what: str) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(what, value) from exc


def _find_value_end(raw: bytes, start: int) -> int:
    """Find the newline that terminates a header value.

    A newline followed by a space continues the value on the next line.

    Returns: offset of the terminating newline
    Raises:
      CorruptObject: if the value runs off the end of the buffer
    """
    end = raw.find(b"\n", start)
    while end != -1 and raw[end + 1 : end + 2] == b" ":
        end = raw.find(b"\n", end + 1)
    if end == -1:
        raise CorruptObject("unterminated header value")
    return end


def parse_mail_map(raw: bytes) -> MailMap:
    """Parse a header block followed by a message.

    Args:
      raw: Uncompressed payload of a commit or tag object
    Returns: dict mapping header names to values; the message is stored under
      ``MESSAGE_KEY``. For duplicate headers the first value is kept.
    Raises:
      CorruptObject: if a header line has no value or a value is unterminated
      InvalidEncoding: if a key, value or the message is not valid UTF-8
    """
    ret: MailMap = {}
    offset = 0
    length = len(raw)
    while offset < length:
        space = raw.find(b" ", offset)
        newline = raw.find(b"\n", offset)
        if newline != -1 and (space == -1 or newline < space):
            if newline != offset:
                raise CorruptObject(
                    f"header line without value: {raw[offset:newline]!r}"
                )
            # Blank line; the remainder is the message.
            ret.setdefault(MESSAGE_KEY, _decode(raw[offset + 1 :], "message"))
            break
        if space == -1:
            raise CorruptObject(f"trailing data after headers: {raw[offset:]!r}")
        end = _find_value_end(raw, space + 1)
        key = _decode(raw[offset:space], "header name")
        value = _decode(raw[space + 1 : end].replace(b"\n ", b"\n"), "header value")
        ret.setdefault(key, value)
        offset = end + 1
    return ret


def format_mail_map(headers: MailMap) -> bytes:
    """Serialize headers and message back into the on-disk format.

    Args:
      headers: dict as returned by ``parse_mail_map``
    Returns: encoded payload
    Raises:
      MissingMessage: if there is no ``MESSAGE_KEY`` entry
      ValueError: if a header name contains a space or newline
    """
    try:
        message = headers[MESSAGE_KEY]
    except KeyError as exc:
        raise MissingMessage() from exc
    chunks = []
    for key, value in headers.items():
        if key == MESSAGE_KEY:
            continue
        if " " in key or "\n" in key:
            raise ValueError(f"invalid header name {key!r}")
        value = value.replace("\n", "\n ")
        chunks.append(f"{key} {value}\n")
    chunks.append("\n")
    chunks.append(message)
    return "".join(chunks).encode("utf-8")
