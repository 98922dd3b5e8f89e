# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Base exception hierarchy for :mod:`delimitedio`."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "DelimitedIOError",
    "MalformedInputError",
]


class DelimitedIOError(Exception):
    """Base class for all delimitedio exceptions.

    Errors raised by the underlying byte source (``OSError`` and friends) are
    never wrapped in this hierarchy; they reach the caller unchanged.

    Example:
        Catch any library-specific error::

            try:
                reader.for_each_record(handle)
            except DelimitedIOError as e:
                logger.error("Reader failed: %s", e)
    """


class ConfigurationError(DelimitedIOError, ValueError):
    """Raised when reader options are unknown or carry invalid values.

    Raised at construction time, before the source is read.

    Note:
        This exception also inherits from ``ValueError``, so it can be caught
        by handlers expecting standard validation errors.
    """


class MalformedInputError(DelimitedIOError, ValueError):
    """Raised when no line terminator fits within the first chunk of input.

    Auto-detection needs the first record and its terminator to fit in
    ``chunk_size`` bytes. The failure is fatal for the session.

    Attributes:
        chunk_size: Configured chunk size in bytes.
        bytes_read: Raw bytes consumed from the source when detection gave up.
    """

    def __init__(self, message: str, *, chunk_size: int, bytes_read: int) -> None:
        super().__init__(message)
        self.chunk_size = chunk_size
        self.bytes_read = bytes_read
