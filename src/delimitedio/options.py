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

"""Reader configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Final

from .errors import ConfigurationError
from .streams import DEFAULT_CHUNK_SIZE

__all__ = [
    "OPTION_KEYS",
    "ReaderOptions",
    "coerce_options",
]


@dataclass(frozen=True, slots=True)
class ReaderOptions:
    """Immutable settings for one :class:`~delimitedio.DelimitedReader`.

    ``delimiter``
        Record separator. ``None`` enables auto-detection of ``"\\r\\n"`` or
        ``"\\n"`` from the first chunk of input.
    ``chunk_size``
        Maximum bytes requested per read. Must hold the first record and its
        delimiter when auto-detecting.
    ``strip_non_printable``
        Drop every byte other than printable ASCII, CR and LF before
        buffering.
    ``force_utf8``
        Deliver records as ``str`` decoded from UTF-8. Invalid sequences are
        carried through as surrogate escapes rather than repaired. When
        disabled, records are raw ``bytes``.
    """

    delimiter: str | bytes | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    strip_non_printable: bool = True
    force_utf8: bool = True

    def __post_init__(self) -> None:
        if self.delimiter is not None:
            if not isinstance(self.delimiter, (str, bytes)):
                msg = (
                    "delimiter must be str, bytes or None, "
                    f"got: {type(self.delimiter).__name__}"
                )
                raise ConfigurationError(msg)
            if not self.delimiter:
                raise ConfigurationError("delimiter must not be empty.")
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            msg = f"chunk_size must be an integer, got: {self.chunk_size!r}"
            raise ConfigurationError(msg)
        if self.chunk_size <= 0:
            msg = f"chunk_size must be positive, got: {self.chunk_size}"
            raise ConfigurationError(msg)
        for name in ("strip_non_printable", "force_utf8"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                msg = f"{name} must be a boolean, got: {value!r}"
                raise ConfigurationError(msg)

    @classmethod
    def from_mapping(cls, options: Mapping[str, object]) -> ReaderOptions:
        """Build options from a mapping, rejecting unknown keys.

        Raises:
            ConfigurationError: If a key is not a reader option or a value is
                invalid.
        """
        unknown = sorted(str(key) for key in options if key not in OPTION_KEYS)
        if unknown:
            msg = f"Unknown reader options: {', '.join(unknown)}"
            raise ConfigurationError(msg)
        return cls(**options)  # pyright: ignore[reportArgumentType]

    def with_overrides(self, **overrides: object) -> ReaderOptions:
        """Return a copy with ``overrides`` applied, validating keys."""
        if not overrides:
            return self
        unknown = sorted(key for key in overrides if key not in OPTION_KEYS)
        if unknown:
            msg = f"Unknown reader options: {', '.join(unknown)}"
            raise ConfigurationError(msg)
        return replace(self, **overrides)  # pyright: ignore[reportArgumentType]

    @property
    def delimiter_bytes(self) -> bytes | None:
        """The delimiter as UTF-8 bytes, or ``None`` when auto-detecting."""
        if self.delimiter is None or isinstance(self.delimiter, bytes):
            return self.delimiter
        return self.delimiter.encode("utf-8")


OPTION_KEYS: Final[frozenset[str]] = frozenset(
    field.name for field in fields(ReaderOptions)
)


def coerce_options(
    options: ReaderOptions | Mapping[str, object] | None,
) -> ReaderOptions:
    """Normalise ``None``, a mapping, or a :class:`ReaderOptions` instance."""
    if options is None:
        return ReaderOptions()
    if isinstance(options, ReaderOptions):
        return options
    if isinstance(options, Mapping):
        return ReaderOptions.from_mapping(options)
    msg = f"Reader options must be a mapping, got: {type(options).__name__}"
    raise ConfigurationError(msg)
