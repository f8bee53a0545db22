"""Excel spreadsheet writer for the filtered balance sheet."""

import enum
import logging
import os
import re
from io import BytesIO
from typing import NamedTuple, Optional

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .filtering import MAIN_HEADERS, TRANSFER_HEADERS, TRANSFER_ROWS
from .names import cell_text
from .workbook import CellValue, Sheet

log = logging.getLogger(__name__)

# Styling constants
HEADER_FONT = Font(bold=True, size=12)
HEADER_FILL = PatternFill(start_color="FFE0E7FF", end_color="FFE0E7FF", fill_type="solid")

THIN_SIDE = Side(style="thin")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)

MAIN_HEADER_MARKER = MAIN_HEADERS[0]
TRANSFER_HEADER_MARKER = TRANSFER_HEADERS[0]

MAIN_COLUMNS = len(MAIN_HEADERS)
TRANSFER_COLUMNS = len(TRANSFER_HEADERS)
TRANSFER_BLOCK_ROWS = TRANSFER_ROWS + 1  # header + data rows
SEPARATOR_ROWS = 2

# Columns that get a styling pass and a computed width
STYLED_COLUMNS = 20
MIN_COLUMN_WIDTH = 10
BLANK_CELL_LENGTH = 10
WIDTH_PADDING = 2


class StyleTag(enum.Enum):
    HEADER = "header"
    MAIN_BORDERED = "main_bordered"
    TRANSFER_HEADER = "transfer_header"
    TRANSFER_BORDERED = "transfer_bordered"
    SEPARATOR = "separator"


class CellStyle(NamedTuple):
    border: bool = False
    emphasis: bool = False


PLAIN = CellStyle()


def _first_cell(row: list[CellValue]) -> CellValue:
    return row[0] if row else None


def find_transfer_blocks(rows: list[list[CellValue]]) -> list[int]:
    """Row indexes where a transfer table header starts."""
    return [i for i, row in enumerate(rows) if _first_cell(row) == TRANSFER_HEADER_MARKER]


def _separator_rows(blocks: list[int]) -> set[int]:
    if not blocks:
        return set()
    separators = set(range(max(blocks[0] - SEPARATOR_ROWS, 0), blocks[0]))
    for start, next_start in zip(blocks, blocks[1:]):
        separators.update(range(start + TRANSFER_BLOCK_ROWS, next_start))
    return separators


def classify_rows(rows: list[list[CellValue]]) -> list[StyleTag]:
    """Tag each row by its structural position in the output layout.

    Separator rows win over transfer blocks, which win over the main table.
    """
    blocks = find_transfer_blocks(rows)
    separators = _separator_rows(blocks)
    in_transfer = set()
    for start in blocks:
        in_transfer.update(range(start, start + TRANSFER_BLOCK_ROWS))

    tags = []
    for i, row in enumerate(rows):
        is_header = i == 0 or _first_cell(row) in (MAIN_HEADER_MARKER, TRANSFER_HEADER_MARKER)
        if i in separators:
            tags.append(StyleTag.SEPARATOR)
        elif i in in_transfer:
            tags.append(StyleTag.TRANSFER_HEADER if is_header else StyleTag.TRANSFER_BORDERED)
        else:
            tags.append(StyleTag.HEADER if is_header else StyleTag.MAIN_BORDERED)
    return tags


def cell_style(tag: StyleTag, column: int) -> CellStyle:
    """Style for a 1-based column of a row with the given tag."""
    if tag in (StyleTag.TRANSFER_HEADER, StyleTag.TRANSFER_BORDERED):
        width = TRANSFER_COLUMNS
    elif tag in (StyleTag.HEADER, StyleTag.MAIN_BORDERED):
        width = MAIN_COLUMNS
    else:
        return PLAIN

    if column > width:
        return PLAIN
    return CellStyle(border=True, emphasis=tag in (StyleTag.HEADER, StyleTag.TRANSFER_HEADER))


def column_widths(rows: list[list[CellValue]], column_count: int) -> list[int]:
    """Fit each column to its longest value; blank cells count as 10 characters."""
    widths = []
    for col in range(column_count):
        longest = 0
        for row in rows:
            value = row[col] if col < len(row) else None
            length = len(cell_text(value)) if value not in (None, "") else BLANK_CELL_LENGTH
            longest = max(longest, length)
        # Under 10 stays 10, so a 9-character column is 10 wide, not 11
        widths.append(MIN_COLUMN_WIDTH if longest < MIN_COLUMN_WIDTH else longest + WIDTH_PADDING)
    return widths


def _write_sheet(ws, rows: list[list[CellValue]]):
    """Write rows with borders, header emphasis and fitted column widths."""
    for row in rows:
        ws.append([None if value == "" else value for value in row])

    tags = classify_rows(rows)
    column_count = max([STYLED_COLUMNS] + [len(row) for row in rows])

    for row_idx, tag in enumerate(tags, start=1):
        for col in range(1, column_count + 1):
            style = cell_style(tag, col)
            if style == PLAIN:
                continue
            cell = ws.cell(row=row_idx, column=col)
            cell.border = THIN_BORDER
            if style.emphasis:
                cell.font = HEADER_FONT
                cell.fill = HEADER_FILL

    for col, width in enumerate(column_widths(rows, column_count), start=1):
        ws.column_dimensions[get_column_letter(col)].width = width


def write_filtered_workbook(sheet: Sheet, filepath: Optional[str] = None) -> bytes:
    """Write the filtered sheet to a styled single-sheet xlsx.

    Args:
        sheet: Output of filter_workbook.
        filepath: Optional path to also save the file to.

    Returns:
        The xlsx file contents.
    """
    wb = Workbook()
    # Remove the default empty sheet
    if "Sheet" in wb.sheetnames:
        del wb["Sheet"]

    ws = wb.create_sheet(title=sheet.name)
    if sheet.rows:
        _write_sheet(ws, sheet.rows)

    buffer = BytesIO()
    wb.save(buffer)
    data = buffer.getvalue()

    if filepath is not None:
        os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)
        with open(filepath, "wb") as f:
            f.write(data)
        log.info("Saved %s", filepath)
    return data


def filtered_filename(original: Optional[str]) -> str:
    """'balances.xlsx' -> 'balances_filtered.xlsx'."""
    base = re.sub(r"\.xlsx?$", "", original or "", flags=re.IGNORECASE)
    return f"{base or 'filtered'}_filtered.xlsx"
