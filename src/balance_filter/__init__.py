"""Club Balance Filter - Match club member balances against a nickname list."""

from .filtering import filter_workbook
from .names import build_name_mapping, read_name_file
from .nicknames import format_nicknames, parse_nicknames
from .spreadsheet import classify_rows, write_filtered_workbook
from .workbook import FileReadError, SheetNotFoundError, read_workbook

__all__ = [
    "filter_workbook",
    "build_name_mapping",
    "read_name_file",
    "format_nicknames",
    "parse_nicknames",
    "classify_rows",
    "write_filtered_workbook",
    "FileReadError",
    "SheetNotFoundError",
    "read_workbook",
]
