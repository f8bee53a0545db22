"""Workbook model and the openpyxl/requests adapters that fill it."""

import logging
import zipfile
from datetime import date, datetime, time
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import requests
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import BaseModel, Field

log = logging.getLogger(__name__)

CellValue = Optional[Union[int, float, str]]

REMOTE_TIMEOUT = 60
MAX_REMOTE_FILE_MB = 100
MAX_REMOTE_FILE_BYTES = MAX_REMOTE_FILE_MB * 1024 * 1024


class BalanceFilterError(Exception):
    """Base class for errors reported to the user."""


class FileReadError(BalanceFilterError):
    """The input could not be read as a spreadsheet."""


class SheetNotFoundError(BalanceFilterError):
    """A required sheet is missing from a workbook."""

    def __init__(self, sheet_name: str):
        super().__init__(f'Sheet "{sheet_name}" not found.')
        self.sheet_name = sheet_name


class Sheet(BaseModel):
    """A named grid of cell values."""

    name: str
    rows: list[list[CellValue]] = Field(default_factory=list)


class Workbook(BaseModel):
    """An ordered collection of sheets."""

    sheets: list[Sheet] = Field(default_factory=list)

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]

    def lookup(self, name: str) -> Sheet:
        """Return the sheet called ``name`` or raise SheetNotFoundError."""
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        raise SheetNotFoundError(name)


def _cell_value(value) -> CellValue:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def read_workbook(data: bytes) -> Workbook:
    """Decode xlsx bytes into a Workbook.

    Rows start at A1 so that column indexes are absolute (index 10 is
    column K). Trailing cells of short rows are not padded.
    """
    try:
        wb = load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError, SyntaxError) as e:
        raise FileReadError(f"Could not read workbook: {e}") from e

    sheets = []
    for ws in wb.worksheets:
        rows = []
        for row in ws.iter_rows(min_row=1, min_col=1, values_only=True):
            values = [_cell_value(v) for v in row]
            while values and values[-1] is None:
                values.pop()
            rows.append(values)
        sheets.append(Sheet(name=ws.title, rows=rows))
        log.debug("Read sheet %r with %d rows", ws.title, len(rows))
    wb.close()
    return Workbook(sheets=sheets)


def _fetch_remote(url: str) -> bytes:
    response = requests.get(url, timeout=REMOTE_TIMEOUT, stream=True)
    try:
        response.raise_for_status()
        declared = response.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > MAX_REMOTE_FILE_BYTES:
            raise FileReadError(f"Remote file is larger than {MAX_REMOTE_FILE_MB} MB.")

        chunks: list[bytes] = []
        downloaded = 0
        for chunk in response.iter_content(chunk_size=1024 * 1024):
            if not chunk:
                continue
            downloaded += len(chunk)
            if downloaded > MAX_REMOTE_FILE_BYTES:
                raise FileReadError(f"Remote file is larger than {MAX_REMOTE_FILE_MB} MB.")
            chunks.append(chunk)
        return b"".join(chunks)
    finally:
        response.close()


def load_source(source: str) -> tuple[str, bytes]:
    """Load a local path or an http(s) URL.

    Returns:
        A ``(filename, data)`` tuple.
    """
    if source.startswith(("http://", "https://")):
        log.info("Downloading %s", source)
        try:
            data = _fetch_remote(source)
        except requests.RequestException as e:
            raise FileReadError(f"Could not download {source}: {e}") from e
        filename = source.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
        return filename or "download.xlsx", data

    path = Path(source)
    try:
        return path.name, path.read_bytes()
    except OSError as e:
        raise FileReadError(f"Could not open {source}: {e}") from e
