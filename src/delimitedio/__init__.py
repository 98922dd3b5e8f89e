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

"""Streaming reader for delimiter-separated records."""

from __future__ import annotations

from .errors import ConfigurationError, DelimitedIOError, MalformedInputError
from .options import OPTION_KEYS, ReaderOptions
from .reader import (
    DelimitedReader,
    Record,
    open_reader,
    strip_non_printable,
    with_reader,
)
from .streams import DEFAULT_CHUNK_SIZE, ByteSource, HostByteSource, MemoryByteSource

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "OPTION_KEYS",
    "ByteSource",
    "ConfigurationError",
    "DelimitedIOError",
    "DelimitedReader",
    "HostByteSource",
    "MalformedInputError",
    "MemoryByteSource",
    "ReaderOptions",
    "Record",
    "open_reader",
    "strip_non_printable",
    "with_reader",
]
