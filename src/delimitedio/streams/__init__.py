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

"""Byte sources for delimited reading.

The reader only needs ``read(size) -> bytes``; these helpers cover the two
common cases of host files and in-memory payloads.

Example usage::

    from delimitedio.streams import HostByteSource

    with HostByteSource.open("export.csv") as source:
        chunk = source.read(65_536)
"""

from __future__ import annotations

from ._host import HostByteSource
from ._memory import MemoryByteSource
from ._protocols import DEFAULT_CHUNK_SIZE, ByteSource, ClosableByteSource

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ByteSource",
    "ClosableByteSource",
    "HostByteSource",
    "MemoryByteSource",
]
