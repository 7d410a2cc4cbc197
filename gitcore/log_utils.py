# log_utils.py -- Logging setup for gitcore
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

"""Logging setup for gitcore.

Modules log through ``getLogger(__name__)``, below the ``gitcore`` logger.
That logger starts out with a ``logging.NullHandler``, so an application
that never configures logging sees nothing from gitcore.

``default_logging_config`` honours ``GIT_TRACE`` the way git does:

=========================  ===================================
``GIT_TRACE``              trace output
=========================  ===================================
unset, ``0``, ``false``    off; INFO and above go to stderr
``1``, ``2``, ``true``     stderr
``3`` to ``9``             that file descriptor
absolute file name         appended to that file
absolute directory name    ``trace.<pid>`` in that directory
=========================  ===================================

Anything else turns tracing off.
"""

__all__ = [
    "PACKAGE_LOGGER",
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
    "trace_destination",
]

import logging
import os
import sys

getLogger = logging.getLogger

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s: %(message)s"

PACKAGE_LOGGER = getLogger("gitcore")
NULL_HANDLER = logging.NullHandler()
PACKAGE_LOGGER.addHandler(NULL_HANDLER)


def trace_destination(value: str | None = None) -> int | str | None:
    """Work out where trace output should go.

    Args:
      value: a GIT_TRACE setting; taken from the environment if omitted
    Returns: a file descriptor, a file name, or None if tracing is off
    """
    if value is None:
        value = os.environ.get("GIT_TRACE", "")
    if value.lower() in ("", "0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return 2
    if value.isdigit():
        fd = int(value)
        return fd if 3 <= fd <= 9 else None
    if not os.path.isabs(value):
        return None
    if os.path.isdir(value):
        return os.path.join(value, f"trace.{os.getpid()}")
    return value


def _trace_handler(destination: int | str) -> logging.Handler:
    if destination == 2:
        return logging.StreamHandler(sys.stderr)
    if isinstance(destination, int):
        return logging.StreamHandler(os.fdopen(destination, "w", buffering=1))
    return logging.FileHandler(destination, mode="a")


def default_logging_config() -> None:
    """Make gitcore log records visible.

    When GIT_TRACE enables tracing, DEBUG and above go to the trace
    destination. Otherwise, or if the destination can not be opened, INFO
    and above go to stderr.
    """
    remove_null_handler()
    destination = trace_destination()
    if destination is not None:
        try:
            handler = _trace_handler(destination)
        except OSError as exc:
            sys.stderr.write(
                f"Warning: can not open GIT_TRACE destination {destination}: {exc}\n"
            )
        else:
            logging.basicConfig(
                level=logging.DEBUG, handlers=[handler], format=TRACE_FORMAT
            )
            return
    logging.basicConfig(level=logging.INFO, stream=sys.stderr, format=DEFAULT_FORMAT)


def remove_null_handler() -> None:
    """Detach the handler that keeps the gitcore logger quiet.

    Call this before configuring handlers of your own.
    """
    PACKAGE_LOGGER.removeHandler(NULL_HANDLER)
