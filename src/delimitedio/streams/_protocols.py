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

"""Byte source protocol consumed by :class:`delimitedio.DelimitedReader`."""

from __future__ import annotations

from typing import Final, Protocol, runtime_checkable

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ByteSource",
    "ClosableByteSource",
]

#: Default number of bytes requested per read (64KB).
DEFAULT_CHUNK_SIZE: Final[int] = 65_536


@runtime_checkable
class ByteSource(Protocol):
    """Anything that hands out bytes on request.

    Binary file objects (``open(path, "rb")``, ``io.BytesIO``,
    ``sys.stdin.buffer``) satisfy this protocol without adaptation. No text
    decoding is expected to have happened before the bytes reach the reader.

    Example::

        with open("access.log", "rb") as handle:
            reader = DelimitedReader.create(handle)
            reader.for_each_record(print)
    """

    def read(self, size: int, /) -> bytes | None:
        """Read up to ``size`` bytes.

        Returns:
            The bytes currently available, possibly fewer than ``size``.
            Empty bytes or ``None`` signal end-of-data.
        """
        ...


@runtime_checkable
class ClosableByteSource(ByteSource, Protocol):
    """Byte source owning a resource that must be released."""

    @property
    def closed(self) -> bool:
        """True if the source has been closed."""
        ...

    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
        ...
