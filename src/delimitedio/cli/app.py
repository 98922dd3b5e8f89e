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

"""Command line entry point for the ``delimitedio`` executable."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

from ..errors import ConfigurationError, MalformedInputError
from ..logging import StructuredLogger, configure_logging, get_logger
from ..options import ReaderOptions
from ..reader import DelimitedReader, Record, open_reader
from ..streams import ByteSource
from .config import load_config, unescape_delimiter

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_MALFORMED = 3
EXIT_IO = 4

STDIN_MARKER = "-"


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    """Run the delimitedio CLI."""

    parser = _build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except SystemExit as exc:  # argparse exits with code 2 on errors
        code = exc.code if isinstance(exc.code, int) else EXIT_USAGE
        return int(code)

    configure_logging(level=args.log_level, json_mode=args.json_logs)
    logger = get_logger(__name__).bind(command=args.command, input=args.input)

    try:
        options = _resolve_options(args)
    except ConfigurationError as error:
        logger.error(
            "Invalid reader configuration.",
            event="cli.config_error",
            context={"error": str(error)},
        )
        return EXIT_USAGE
    except FileNotFoundError as error:
        logger.error(
            "Configuration file missing.",
            event="cli.config_missing",
            context={"error": str(error)},
        )
        return EXIT_USAGE

    source: ByteSource | str = args.input
    if args.input == STDIN_MARKER:
        source = stdin if stdin is not None else sys.stdin.buffer
    out = stdout if stdout is not None else sys.stdout.buffer

    try:
        with open_reader(source, options) as reader:
            if args.command == "detect":
                return _run_detect(reader, out)
            return _run_records(reader, out, output_format=args.format, logger=logger)
    except MalformedInputError as error:
        logger.error(
            "Could not split input into records.",
            event="cli.malformed_input",
            context={
                "error": str(error),
                "chunk_size": error.chunk_size,
                "bytes_read": error.bytes_read,
            },
        )
        return EXIT_MALFORMED
    except OSError as error:
        logger.error(
            "Failed to read input.",
            event="cli.io_error",
            context={"error": str(error)},
        )
        return EXIT_IO


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delimitedio",
        description="Split a byte stream into delimited records.",
    )
    _ = parser.add_argument(
        "--log-level",
        choices=("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"),
        default=None,
        help="Override the log level emitted by the CLI.",
    )
    _ = parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Emit structured JSON logs (disable with --no-json-logs).",
    )
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="TOML or YAML file with reader options.",
    )

    subcommands = parser.add_subparsers(dest="command", required=True)

    records_parser = subcommands.add_parser(
        "records",
        help="Print every complete record on its own line.",
    )
    _add_reader_arguments(records_parser)
    _ = records_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Write raw records (text) or one JSON string per line (json).",
    )

    detect_parser = subcommands.add_parser(
        "detect",
        help="Print the record delimiter as a JSON string.",
    )
    _add_reader_arguments(detect_parser)

    return parser


def _add_reader_arguments(parser: argparse.ArgumentParser) -> None:
    _ = parser.add_argument(
        "input",
        help="Path to read, or '-' for standard input.",
    )
    _ = parser.add_argument(
        "--delimiter",
        default=None,
        help="Record delimiter; \\r, \\n and \\t escapes are expanded. "
        "Auto-detected when omitted.",
    )
    _ = parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Bytes requested per read (default: 65536).",
    )
    _ = parser.add_argument(
        "--strip-non-printable",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Drop bytes other than printable ASCII, CR and LF.",
    )
    _ = parser.add_argument(
        "--force-utf8",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat records as UTF-8 text.",
    )


def _resolve_options(args: argparse.Namespace) -> ReaderOptions:
    delimiter = args.delimiter
    if delimiter is not None:
        delimiter = unescape_delimiter(delimiter)
    return load_config(
        args.config,
        {
            "delimiter": delimiter,
            "chunk_size": args.chunk_size,
            "strip_non_printable": args.strip_non_printable,
            "force_utf8": args.force_utf8,
        },
    )


def _run_records(
    reader: DelimitedReader,
    out: BinaryIO,
    *,
    output_format: str,
    logger: StructuredLogger,
) -> int:
    def emit(record: Record) -> None:
        if output_format == "json":
            text = (
                record
                if isinstance(record, str)
                else record.decode("utf-8", "replace")
            )
            _ = out.write(json.dumps(text).encode("utf-8") + b"\n")
        else:
            _ = out.write(_as_bytes(record) + b"\n")

    count = reader.for_each_record(emit)
    out.flush()
    logger.info(
        "Finished reading records.",
        event="cli.records.done",
        context={
            "records": count,
            "bytes_read": reader.bytes_read,
            "discarded_bytes": len(reader.discarded),
        },
    )
    return EXIT_OK


def _run_detect(reader: DelimitedReader, out: BinaryIO) -> int:
    if reader.delimiter is None:
        records = reader.records()
        # The first record, or end-of-data, fixes the delimiter.
        _ = next(records, None)
        records.close()
    delimiter = reader.delimiter
    if isinstance(delimiter, str):
        text = delimiter
    else:
        text = _as_bytes(delimiter).decode("utf-8", "replace")
    _ = out.write(json.dumps(text).encode("utf-8") + b"\n")
    out.flush()
    return EXIT_OK


def _as_bytes(record: Record | None) -> bytes:
    if record is None:
        return b""
    if isinstance(record, str):
        return record.encode("utf-8", "surrogateescape")
    return record


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
