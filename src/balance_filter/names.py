"""Nickname to display name lookup built from the player overview sheet."""

import logging

from .workbook import CellValue, Workbook

log = logging.getLogger(__name__)

NAME_SHEET = "Player overview"
NICK_HEADERS = ("Nick", "nick", "NICK")
NAME_HEADERS = ("Name", "name", "NAME")


def cell_text(value: CellValue) -> str:
    """Render a cell as text, integral floats without a trailing .0."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _first_value(record: dict, headers: tuple[str, ...]) -> CellValue:
    for header in headers:
        value = record.get(header)
        if value:
            return value
    return None


def build_name_mapping(rows: list[list[CellValue]]) -> dict[str, str]:
    """Build a lowercased-nick -> name mapping.

    The first row holds the column headers. Rows missing either a nick or a
    name are skipped; a later duplicate nick replaces an earlier one.
    """
    if not rows:
        return {}

    headers = [cell_text(h) for h in rows[0]]
    mapping: dict[str, str] = {}
    for row in rows[1:]:
        record = {}
        for header, value in zip(headers, row):
            # First column wins when a header repeats
            if header and header not in record:
                record[header] = value

        nick = _first_value(record, NICK_HEADERS)
        name = _first_value(record, NAME_HEADERS)
        if nick and name:
            mapping[cell_text(nick).lower()] = cell_text(name)

    log.debug("Built name mapping with %d entries", len(mapping))
    return mapping


def read_name_file(workbook: Workbook) -> dict[str, str]:
    """Build the name mapping from the workbook's player overview sheet."""
    sheet = workbook.lookup(NAME_SHEET)
    return build_name_mapping(sheet.rows)
