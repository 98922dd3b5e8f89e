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

"""Configuration helpers for the :mod:`delimitedio.cli.app` entry point."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import cast

import yaml

from ..errors import ConfigurationError
from ..options import ReaderOptions

ENV_DELIMITER = "DELIMITEDIO_DELIMITER"
ENV_CHUNK_SIZE = "DELIMITEDIO_CHUNK_SIZE"
ENV_STRIP_NON_PRINTABLE = "DELIMITEDIO_STRIP_NON_PRINTABLE"
ENV_FORCE_UTF8 = "DELIMITEDIO_FORCE_UTF8"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})
_ESCAPES = ((r"\r", "\r"), (r"\n", "\n"), (r"\t", "\t"))

__all__ = ["ConfigurationError", "load_config", "unescape_delimiter"]


def load_config(
    path: Path | Mapping[str, object] | None,
    cli_overrides: Mapping[str, object] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ReaderOptions:
    """Resolve reader options from a file, the environment and the CLI.

    Parameters
    ----------
    path:
        TOML or YAML file holding reader options at its root or under a
        ``reader`` table. ``None`` skips file loading. Tests may pass an
        in-memory mapping instead.
    cli_overrides:
        Options given on the command line. ``None`` values are ignored.
    env:
        Optional environment mapping. Defaults to :data:`os.environ`.

    Returns
    -------
    ReaderOptions
        The resolved options; later sources win over earlier ones.
    """

    env_map = os.environ if env is None else env

    if path is None:
        raw: Mapping[str, object] = {}
    elif isinstance(path, Mapping):
        raw = path
    else:
        raw = _load_config_file(path)

    config = _normalise_config(raw)
    config.update(_environment_overrides(env_map))
    if cli_overrides is not None:
        config.update(
            {key: value for key, value in cli_overrides.items() if value is not None}
        )

    return ReaderOptions.from_mapping(config)


def _load_config_file(path: Path) -> dict[str, object]:
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    data: object
    if suffix == ".toml" or not suffix:
        with path.open("rb") as handle:
            try:
                data = tomllib.load(handle)
            except tomllib.TOMLDecodeError as error:
                msg = f"Invalid TOML in {path}: {error}"
                raise ConfigurationError(msg) from error
    elif suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle) or {}
            except yaml.YAMLError as error:
                msg = f"Invalid YAML in {path}: {error}"
                raise ConfigurationError(msg) from error
    else:
        msg = f"Unsupported configuration format: {path.suffix}"
        raise ConfigurationError(msg)

    if not isinstance(data, MutableMapping):
        msg = "Configuration file must contain a mapping at the root."
        raise ConfigurationError(msg)

    mapping = cast(MutableMapping[object, object], data)
    typed_data: dict[str, object] = {}
    for key, value in mapping.items():
        if not isinstance(key, str):
            msg = f"Configuration keys must be strings (got {key!r})."
            raise ConfigurationError(msg)
        typed_data[key] = value
    return typed_data


def _normalise_config(raw: Mapping[str, object]) -> dict[str, object]:
    section_obj = raw.get("reader")
    if section_obj is None:
        section: Mapping[str, object] = raw
    elif isinstance(section_obj, Mapping):
        section = cast(Mapping[str, object], section_obj)
    else:
        msg = "The 'reader' section must be a table."
        raise ConfigurationError(msg)

    # Accept the camelCase spellings used by other tooling.
    aliases = {
        "chunkSize": "chunk_size",
        "buffer_size": "chunk_size",
        "stripNonPrintable": "strip_non_printable",
        "forceUTF8": "force_utf8",
        "utf8": "force_utf8",
    }
    config: dict[str, object] = {}
    for key, value in section.items():
        config[aliases.get(key, key)] = value
    return config


def _environment_overrides(env: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if ENV_DELIMITER in env:
        overrides["delimiter"] = unescape_delimiter(env[ENV_DELIMITER])
    if ENV_CHUNK_SIZE in env:
        overrides["chunk_size"] = _coerce_int(ENV_CHUNK_SIZE, env[ENV_CHUNK_SIZE])
    if ENV_STRIP_NON_PRINTABLE in env:
        overrides["strip_non_printable"] = _coerce_bool(
            ENV_STRIP_NON_PRINTABLE, env[ENV_STRIP_NON_PRINTABLE]
        )
    if ENV_FORCE_UTF8 in env:
        overrides["force_utf8"] = _coerce_bool(ENV_FORCE_UTF8, env[ENV_FORCE_UTF8])
    return overrides


def unescape_delimiter(value: str) -> str:
    """Expand ``\\r``, ``\\n`` and ``\\t`` so delimiters fit on a shell line."""
    for escaped, raw in _ESCAPES:
        value = value.replace(escaped, raw)
    return value


def _coerce_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        msg = f"{name} must be an integer (got {value!r})."
        raise ConfigurationError(msg) from None


def _coerce_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    msg = f"{name} must be a boolean flag (got {value!r})."
    raise ConfigurationError(msg)
