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

"""Host file byte source.

Opens a file on the host in binary mode so that no newline translation or
decoding happens before the reader sees the bytes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Self

__all__ = ["HostByteSource"]


@dataclass(slots=True)
class HostByteSource:
    """Byte source backed by a native file handle."""

    _path: str
    _handle: BinaryIO
    _size: int
    _closed: bool = field(default=False, init=False)

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> HostByteSource:
        """Open a file for binary reading.

        The size is taken from the open descriptor via ``os.fstat``.

        Raises:
            FileNotFoundError: If the file does not exist.
            IsADirectoryError: If the path is a directory.
        """
        resolved = Path(path)
        try:
            handle = resolved.open("rb")
        except FileNotFoundError:
            raise FileNotFoundError(str(path)) from None
        except IsADirectoryError:
            msg = f"Is a directory: {path}"
            raise IsADirectoryError(msg) from None
        size = os.fstat(handle.fileno()).st_size
        return cls(_path=str(path), _handle=handle, _size=size)

    @property
    def path(self) -> str:
        """Path being read."""
        return self._path

    @property
    def size(self) -> int:
        """File size in bytes when the file was opened."""
        return self._size

    @property
    def position(self) -> int:
        """Current read position in bytes."""
        self._check_closed()
        return self._handle.tell()

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
        return self._handle.read(size)

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
        """Close the file handle."""
        if not self._closed:
            self._handle.close()
            self._closed = True
