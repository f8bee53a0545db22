"""Shared fixtures: small workbooks built in memory with openpyxl."""

from __future__ import annotations

from io import BytesIO

import pytest
from openpyxl import Workbook

from balance_filter.workbook import Sheet, Workbook as BalanceWorkbook


def xlsx_bytes(sheets: dict[str, list[list]]) -> bytes:
    """Serialize ``{sheet name: rows}`` to xlsx bytes."""
    wb = Workbook()
    del wb["Sheet"]
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def balance_row(nickname, balance=None) -> list:
    """A source row with the nickname in column K and the balance in L."""
    row = [None] * 10 + [nickname]
    if balance is not None:
        row.append(balance)
    return row


PREAMBLE = [["Club report"], ["Generated"], ["Member", "", "", "", "", "", "", "", "", "", "Nick", "Balance"]]


def balance_workbook(*rows: list) -> BalanceWorkbook:
    return BalanceWorkbook(sheets=[Sheet(name="Club Member Balance", rows=PREAMBLE + list(rows))])


@pytest.fixture
def balance_xlsx() -> bytes:
    return xlsx_bytes({
        "Club Member Balance": PREAMBLE + [
            balance_row("gustav99", 5000),
            balance_row("Kari_K", -1200.5),
            balance_row("stranger", 300),
        ],
    })


@pytest.fixture
def names_xlsx() -> bytes:
    return xlsx_bytes({
        "Player overview": [
            ["Nick", "Name"],
            ["gustav99", "Gustav A"],
            ["kari", "Kari K"],
        ],
    })
