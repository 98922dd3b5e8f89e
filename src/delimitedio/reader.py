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

"""Streaming delimited record reader.

The reader pulls bounded chunks from a byte source, keeps the bytes that do
not yet form a complete record in an internal buffer, and hands every
complete record to the caller with its delimiter removed. Memory use is
bounded by the chunk size plus the longest record.

Example::

    from delimitedio import with_reader

    def count(reader):
        return sum(1 for _ in reader)

    total = with_reader("events.log", {"chunk_size": 1 << 20}, count)
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Final

from .errors import MalformedInputError
from .logging import StructuredLogger, get_logger
from .options import ReaderOptions, coerce_options
from .streams import ByteSource, HostByteSource

__all__ = [
    "DelimitedReader",
    "Record",
    "open_reader",
    "strip_non_printable",
    "with_reader",
]

type Record = str | bytes

logger: StructuredLogger = get_logger(__name__)

_TERMINATOR: Final = re.compile(rb"\r\n|\n")
_DEFAULT_DELIMITER: Final = b"\n"
_KEPT_BYTES: Final = frozenset(range(0x20, 0x7F)) | {0x0D, 0x0A}
_NON_PRINTABLE: Final = bytes(b for b in range(256) if b not in _KEPT_BYTES)


def strip_non_printable(chunk: bytes) -> bytes:
    """Drop every byte other than printable ASCII, CR and LF."""
    return chunk.translate(None, _NON_PRINTABLE)


class DelimitedReader:
    """Split a byte source into delimiter-separated records.

    The delimiter is either configured or detected once from the first
    chunk of input; after that it never changes. Records are delivered in
    stream order without their delimiter. Bytes after the final delimiter
    are not delivered: at end-of-data they are discarded and kept only in
    :attr:`discarded` for inspection.

    A reader is single-use and not thread-safe. Separate readers over
    separate sources share no state.
    """

    __slots__ = (
        "_buffer",
        "_bytes_read",
        "_delimiter",
        "_discarded",
        "_logger",
        "_options",
        "_records_emitted",
        "_source",
    )

    def __init__(
        self, source: ByteSource, options: ReaderOptions | None = None
    ) -> None:
        if not isinstance(source, ByteSource):
            msg = f"source must provide read(size), got: {type(source).__name__}"
            raise TypeError(msg)
        self._source = source
        self._options = options if options is not None else ReaderOptions()
        self._buffer = b""
        self._delimiter: bytes | None = self._options.delimiter_bytes
        self._discarded = b""
        self._bytes_read = 0
        self._records_emitted = 0
        self._logger = logger.bind(source=_describe(source))

    @classmethod
    def create(
        cls,
        source: ByteSource,
        options: ReaderOptions | Mapping[str, object] | None = None,
        **overrides: object,
    ) -> DelimitedReader:
        """Validate ``options`` and build a reader. Nothing is read yet.

        Raises:
            ConfigurationError: On unknown option keys or invalid values.
        """
        resolved = coerce_options(options).with_overrides(**overrides)
        return cls(source, resolved)

    @property
    def source(self) -> ByteSource:
        return self._source

    @property
    def options(self) -> ReaderOptions:
        return self._options

    @property
    def delimiter(self) -> Record | None:
        """Configured or detected delimiter, ``None`` until detection runs."""
        if self._delimiter is None:
            return None
        return self._decode(self._delimiter)

    @property
    def bytes_read(self) -> int:
        """Raw bytes pulled from the source so far."""
        return self._bytes_read

    @property
    def records_emitted(self) -> int:
        return self._records_emitted

    @property
    def pending(self) -> int:
        """Size in bytes of the buffered partial record."""
        return len(self._buffer)

    @property
    def discarded(self) -> bytes:
        """Unterminated trailing fragment dropped at end-of-data."""
        return self._discarded

    def for_each_record(self, callback: Callable[[Record], object]) -> int:
        """Invoke ``callback`` with every complete record in stream order.

        Returns:
            Number of records delivered by this call.

        Raises:
            MalformedInputError: If no delimiter can be detected.
        """
        delivered = 0
        for record in self.records():
            callback(record)
            delivered += 1
        return delivered

    def records(self) -> Iterator[Record]:
        """Yield complete records until the source is exhausted."""
        while self._read_chunk():
            delimiter = self._delimiter or self._detect_delimiter()
            if delimiter is None:
                continue
            *complete, self._buffer = self._buffer.split(delimiter)
            for record in complete:
                self._records_emitted += 1
                yield self._decode(record)
        self._finish()

    def __iter__(self) -> Iterator[Record]:
        return self.records()

    def _read_chunk(self) -> bool:
        """Append the next chunk to the buffer. Returns False at end-of-data."""
        chunk = self._source.read(self._options.chunk_size)
        if not chunk:
            return False
        self._bytes_read += len(chunk)
        if self._options.strip_non_printable:
            chunk = strip_non_printable(chunk)
        self._buffer += chunk
        return True

    def _detect_delimiter(self) -> bytes | None:
        chunk_size = self._options.chunk_size
        match = _TERMINATOR.search(self._buffer, 0, chunk_size)
        if match is not None:
            return self._fix_delimiter(match.group(), "reader.delimiter.detected")
        if len(self._buffer) > chunk_size:
            msg = (
                "Malformed data. Could not find \\r\\n or \\n within the "
                f"chunk_size of {chunk_size}. Read {self._bytes_read} bytes "
                "from stream."
            )
            raise MalformedInputError(
                msg, chunk_size=chunk_size, bytes_read=self._bytes_read
            )
        return None

    def _fix_delimiter(self, delimiter: bytes, event: str) -> bytes:
        self._delimiter = delimiter
        self._logger.debug(
            "Record delimiter fixed.",
            event=event,
            context={"delimiter": delimiter, "bytes_read": self._bytes_read},
        )
        return delimiter

    def _finish(self) -> None:
        if self._delimiter is None:
            # Input shorter than one chunk with no line terminator.
            _ = self._fix_delimiter(_DEFAULT_DELIMITER, "reader.delimiter.defaulted")
        if self._buffer:
            self._discarded = self._buffer
            self._buffer = b""
            self._logger.debug(
                "Discarding unterminated trailing fragment.",
                event="reader.fragment.discarded",
                context={"bytes": len(self._discarded)},
            )
        self._logger.debug(
            "End of data.",
            event="reader.eof",
            context={
                "bytes_read": self._bytes_read,
                "records": self._records_emitted,
            },
        )

    def _decode(self, data: bytes) -> Record:
        if self._options.force_utf8:
            return data.decode("utf-8", "surrogateescape")
        return data


@contextmanager
def open_reader(
    source: ByteSource | str | os.PathLike[str],
    options: ReaderOptions | Mapping[str, object] | None = None,
    **overrides: object,
) -> Iterator[DelimitedReader]:
    """Scope a reader session over a path or an already-open source.

    Paths are opened in binary mode and closed exactly once when the block
    exits, however it exits. Sources passed in directly stay open; their
    owner closes them.

    Raises:
        ConfigurationError: Before the path is opened, on invalid options.
    """
    resolved = coerce_options(options).with_overrides(**overrides)
    if isinstance(source, ByteSource):
        yield DelimitedReader(source, resolved)
        return

    handle = HostByteSource.open(source)
    session_logger = logger.bind(source=handle.path)
    session_logger.debug(
        "Opened reader session.",
        event="reader.session.opened",
        context={"size": handle.size},
    )
    try:
        yield DelimitedReader(handle, resolved)
    finally:
        handle.close()
        session_logger.debug("Closed reader session.", event="reader.session.closed")


def with_reader[T](
    source: ByteSource | str | os.PathLike[str],
    options: ReaderOptions | Mapping[str, object] | None,
    body: Callable[[DelimitedReader], T],
) -> T:
    """Run ``body`` with a reader inside :func:`open_reader` and return its result."""
    with open_reader(source, options) as reader:
        return body(reader)


def _describe(source: object) -> str:
    for attribute in ("path", "name"):
        value = getattr(source, attribute, None)
        if isinstance(value, str):
            return value
    return type(source).__name__
