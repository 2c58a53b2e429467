# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from types import TracebackType
from typing import Any, Literal

from pytwfl.lib.constants import MAX_CAPTURE_BYTES
from pytwfl.lib.types import PathLike

DEFAULT_HEXDUMP_BYTES_PER_LINE: int = 16


class FileProcessor:
    def __init__(self, filepath: PathLike) -> None:
        """
        A utility class to read capture files and write analysis outputs.

        Args:
            filepath: Path to the primary file to manage.
        """
        self.logger   = logging.getLogger(self.__class__.__name__)
        self.filepath = Path(filepath)
        self.logger.debug(f"Initialized FileProcessor with path: {self.filepath}")

    # ──────────────────────────────────────────────────────────────────────
    # Filesystem basics
    # ──────────────────────────────────────────────────────────────────────
    def file_exists(self) -> bool:
        """Checks if the file exists."""
        return self.filepath.exists()

    def read_file(self) -> bytes:
        """
        Reads the whole file as bytes.

        Raises:
            FileNotFoundError: If the file does not exist.
            OSError: On any other read failure.
        """
        try:
            with open(self.filepath, "rb") as file:
                data = file.read()
        except FileNotFoundError:
            self.logger.error(f"File not found: {self.filepath}")
            raise
        except OSError as e:
            self.logger.error(f"Error reading file {self.filepath}: {e}")
            raise

        self.logger.debug(f"Read {len(data)} bytes from {self.filepath}")
        if len(data) > MAX_CAPTURE_BYTES:
            self.logger.warning(f"{self.filepath} is {len(data)} bytes, above the {MAX_CAPTURE_BYTES}-byte capture ceiling")
        return data

    def write_file(self, data: bytes | str | dict, *, append: bool = False) -> bool:
        """
        Writes data to the file.

        Args:
            data: Data to write (bytes | str | dict). dict is JSON-encoded (utf-8).
            append: If True, appends instead of overwriting.

        Returns:
            True on success, False otherwise.
        """
        mode = "ab" if append else "wb"
        try:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)

            if isinstance(data, str):
                data_bytes = data.encode("utf-8")
            elif isinstance(data, dict):
                data_bytes = json.dumps(data, indent=2).encode("utf-8")
            elif isinstance(data, bytes):
                data_bytes = data
            else:
                raise ValueError("Unsupported type for file write")

            with open(self.filepath, mode) as file:
                file.write(data_bytes)
            self.logger.debug(f"Wrote {len(data_bytes)} bytes to {self.filepath}")
            return True
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to write to {self.filepath}: {e}")
            return False

    # ──────────────────────────────────────────────────────────────────────
    # CSV
    # ──────────────────────────────────────────────────────────────────────
    def write_csv(
        self,
        data: list[dict[str, Any]] | list[list[Any]],
        headers: list[str] | None = None,
        *,
        append: bool = False,
    ) -> bool:
        """
        Writes tabular data to the file (dict rows or list rows).

        Args:
            data: Rows to write.
            headers: Column headers (required for list rows; ignored for dict rows).
            append: Append rows if True; otherwise overwrite.

        Returns:
            True on success, False otherwise.
        """
        target = self.filepath
        mode   = "a" if append else "w"

        if not data:
            self.logger.warning("No data provided for CSV write.")
            return False

        try:
            target.parent.mkdir(parents=True, exist_ok=True)

            with open(target, mode, newline="", encoding="utf-8") as csvfile:
                first = data[0]
                if isinstance(first, dict):
                    writer = csv.DictWriter(csvfile, fieldnames=list(first.keys()))
                    if not append:
                        writer.writeheader()
                    writer.writerows(data)  # type: ignore
                else:
                    plain = csv.writer(csvfile)
                    if headers and not append:
                        plain.writerow(headers)
                    plain.writerows(data)  # type: ignore

            self.logger.debug(f"Wrote {len(data)} rows to CSV at {target}")
            return True
        except OSError as e:
            self.logger.error(f"Failed to write CSV to {target}: {e}")
            return False

    # ──────────────────────────────────────────────────────────────────────
    # Hex helpers
    # ──────────────────────────────────────────────────────────────────────
    def hexdump(
        self,
        *,
        bytes_per_line: int = DEFAULT_HEXDUMP_BYTES_PER_LINE,
        limit_bytes: int | None = None,
    ) -> list[str]:
        """
        Generate a hexdump view of the file contents as text lines.

        Useful for inspecting a capture header that fails to decode.

        Parameters
        ----------
        bytes_per_line:
            Number of bytes per output line. Non-positive values are coerced to
            DEFAULT_HEXDUMP_BYTES_PER_LINE.
        limit_bytes:
            Optional maximum number of bytes to render from the start of the
            file. If None, the entire file is dumped.

        Returns
        -------
        List[str]
            Hexdump lines with offset, hex bytes, and ASCII representation.
            Empty when the file is empty.
        """
        if bytes_per_line <= 0:
            bytes_per_line = DEFAULT_HEXDUMP_BYTES_PER_LINE

        data = self.read_file()
        if not data:
            self.logger.warning("No data available for hexdump.")
            return []

        if limit_bytes is not None and limit_bytes > 0:
            data = data[:limit_bytes]

        lines: list[str] = []
        offset: int      = 0
        total_len: int   = len(data)

        while offset < total_len:
            chunk = data[offset : offset + bytes_per_line]

            hex_bytes    = " ".join(f"{b:02x}" for b in chunk)
            ascii_repr   = "".join(chr(b) if 32 <= b <= 126 else "." for b in chunk)
            padding_size = bytes_per_line - len(chunk)

            if padding_size > 0:
                hex_bytes = f"{hex_bytes}{'   ' * padding_size}"

            lines.append(f"{offset:08x}  {hex_bytes}  |{ascii_repr}|")
            offset += len(chunk)

        return lines

    # ──────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────────────
    def __str__(self) -> str:
        return f"FileProcessor({self.filepath})"

    def __repr__(self) -> str:
        return f"FileProcessor(filepath={self.filepath})"

    def __enter__(self) -> FileProcessor:
        return self

    def __exit__(self, exc_type: type | None,
                 exc_value: BaseException | None,
                 traceback: TracebackType | None) -> Literal[False]:
        if exc_type:
            self.logger.error(f"Exception in FileProcessor: {exc_value}")
        return False
