"""Filter the club member balance sheet down to the listed players."""

import logging
import math
from typing import Optional, Union

from .models import MatchedRow, NicknameEntry
from .names import cell_text
from .nicknames import DECIMAL_NUMBER
from .workbook import CellValue, Sheet, Workbook

log = logging.getLogger(__name__)

BALANCE_SHEET = "Club Member Balance"

HEADER_ROWS = 3
COL_NICKNAME = 10  # K
COL_BALANCE = 11  # L

MAIN_HEADERS = [
    "Nickname",
    "Name",
    "Line Amount",
    "Chips",
    "Has Line",
    "Profit/Loss",
    "Pm",
    "uttak sum",
    "ruller",
    "Claima chips",
    "satt opp",
    "Message",
]
TRANSFER_HEADERS = ["Avsender", "sum", "Mottaker", "bekreftet", "purra"]

SECTION_GAP = 2
TRANSFER_GAP = 10
TRANSFER_TABLES = 3
TRANSFER_ROWS = 10


def _cell(row: list[CellValue], index: int) -> CellValue:
    return row[index] if index < len(row) else None


def _balance(value: CellValue) -> Union[int, float]:
    """Numeric balance of a cell; blanks, non-numeric text and inf/nan count as 0."""
    number: Union[int, float] = 0
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str) and DECIMAL_NUMBER.fullmatch(value.strip()):
        number = float(value.strip())
    elif value not in (None, ""):
        log.debug("Non-numeric balance %r treated as 0", value)

    if not math.isfinite(number):
        log.debug("Non-finite balance %r treated as 0", value)
        return 0
    return number


def find_match(text: str, entries: list[NicknameEntry]) -> Optional[NicknameEntry]:
    """First entry whose nickname occurs in ``text``, case-insensitively.

    Entry order decides ties: with ``["a", "ab"]`` the text ``"abc"``
    matches ``"a"``.
    """
    text = text.lower()
    for entry in entries:
        if entry.nickname.lower() in text:
            return entry
    return None


def resolve_name(source: str, entry: NicknameEntry, name_mapping: dict[str, str]) -> str:
    """Look up the display name by sheet nickname, then by entered nickname."""
    return name_mapping.get(source.lower()) or name_mapping.get(entry.nickname.lower()) or ""


def match_rows(
    rows: list[list[CellValue]],
    entries: list[NicknameEntry],
    name_mapping: dict[str, str],
) -> list[MatchedRow]:
    """Match data rows (header rows already removed) against the entries."""
    matched = []
    for row in rows:
        raw_nickname = _cell(row, COL_NICKNAME)
        source = cell_text(raw_nickname)
        entry = find_match(source, entries)
        if entry is None:
            continue

        balance_cell = _cell(row, COL_BALANCE)
        matched.append(MatchedRow.from_match(
            raw_nickname,
            entry,
            _balance(balance_cell),
            resolved_name=resolve_name(source, entry, name_mapping),
            chips=balance_cell,
        ))
    return matched


def _blank_rows(count: int) -> list[list[CellValue]]:
    return [[] for _ in range(count)]


def build_layout(matched: list[MatchedRow]) -> list[list[CellValue]]:
    """Assemble the positive and negative tables followed by the transfer tables."""
    positive = [m for m in matched if m.profit_loss >= 0]
    negative = [m for m in matched if m.profit_loss < 0]
    positive.sort(key=lambda m: m.profit_loss, reverse=True)
    negative.sort(key=lambda m: m.profit_loss, reverse=True)

    rows: list[list[CellValue]] = [list(MAIN_HEADERS)]
    rows.extend(m.to_cells() for m in positive)
    rows.extend(_blank_rows(SECTION_GAP))
    rows.append(list(MAIN_HEADERS))
    rows.extend(m.to_cells() for m in negative)
    rows.extend(_blank_rows(TRANSFER_GAP))

    for i in range(TRANSFER_TABLES):
        if i:
            rows.extend(_blank_rows(SECTION_GAP))
        rows.append(list(TRANSFER_HEADERS))
        rows.extend([None] * len(TRANSFER_HEADERS) for _ in range(TRANSFER_ROWS))
    return rows


def filter_workbook(
    workbook: Workbook,
    entries: list[NicknameEntry],
    name_mapping: Optional[dict[str, str]] = None,
) -> Sheet:
    """Filter the balance sheet by nickname entries.

    Drops the first three rows, keeps rows whose column K contains one of
    the nicknames, and computes profit/loss from column L minus the
    entry's line. With no entries the result is an empty sheet.

    Args:
        workbook: Uploaded workbook holding the balance sheet.
        entries: Parsed nickname entries, in priority order.
        name_mapping: Lowercased nick -> display name.

    Returns:
        The output sheet, named after the balance sheet.
    """
    source = workbook.lookup(BALANCE_SHEET)

    if not entries:
        return Sheet(name=BALANCE_SHEET)

    matched = match_rows(source.rows[HEADER_ROWS:], entries, name_mapping or {})
    log.info("Matched %d of %d rows", len(matched), max(len(source.rows) - HEADER_ROWS, 0))
    return Sheet(name=BALANCE_SHEET, rows=build_layout(matched))
