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

"""In-memory byte source backed by :class:`io.BytesIO`."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Self

__all__ = ["MemoryByteSource"]


@dataclass(slots=True)
class MemoryByteSource:
    """Byte source over a bytes payload held in memory.

    ``max_read`` caps how many bytes a single ``read`` call returns, which
    mimics pipes and sockets that deliver less than requested.
    """

    _name: str
    _buffer: io.BytesIO
    _size: int
    _max_read: int | None = None
    _closed: bool = field(default=False, init=False)

    @classmethod
    def from_bytes(
        cls,
        content: bytes,
        *,
        name: str = "<memory>",
        max_read: int | None = None,
    ) -> MemoryByteSource:
        """Create a source from bytes content.

        Args:
            content: Bytes to serve (copied).
            name: Label used in log context.
            max_read: Optional upper bound on bytes returned per read.

        Returns:
            New MemoryByteSource instance.

        Raises:
            ValueError: If ``max_read`` is not positive.
        """
        if max_read is not None and max_read <= 0:
            msg = f"max_read must be positive, got: {max_read}"
            raise ValueError(msg)
        return cls(
            _name=name,
            _buffer=io.BytesIO(content),
            _size=len(content),
            _max_read=max_read,
        )

    @property
    def name(self) -> str:
        """Label of the source."""
        return self._name

    @property
    def size(self) -> int:
        """Total size in bytes."""
        return self._size

    @property
    def position(self) -> int:
        """Current read position."""
        self._check_closed()
        return self._buffer.tell()

    @property
    def closed(self) -> bool:
        """True if the source has been closed."""
        return self._closed

    def _check_closed(self) -> None:
        if self._closed:
            msg = "I/O operation on closed file"
            raise ValueError(msg)

    def read(self, size: int = -1, /) -> bytes:
        """Read up to size bytes."""
        self._check_closed()
        if self._max_read is not None and (size < 0 or size > self._max_read):
            size = self._max_read
        return self._buffer.read(size)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the source."""
        if not self._closed:
            self._buffer.close()
            self._closed = True
