"""Single-user session state and the actions that drive it.

Each action reports failures through ``session.notice`` instead of raising,
and leaves the previous state in place when it fails. Filtering and
downloading share the ``is_processing`` flag, so only one of them runs at a
time.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from pydantic import BaseModel, Field

from .filtering import filter_workbook
from .models import NicknameEntry
from .names import read_name_file
from .nicknames import format_nicknames, parse_nicknames
from .spreadsheet import filtered_filename, write_filtered_workbook
from .workbook import BalanceFilterError, Sheet, Workbook, read_workbook

log = logging.getLogger(__name__)

READ_ERROR_NOTICE = "Error reading Excel file. Please make sure it is a valid Excel file."
NAME_FILE_ERROR_NOTICE = (
    'Error reading name file. Please check that it has a "Player overview" '
    "sheet with Nick and Name columns."
)
FILTER_ERROR_NOTICE = "Error filtering file. Please check the file format."
DOWNLOAD_ERROR_NOTICE = "Error creating the filtered file."
BUSY_NOTICE = "Another action is still running."
NO_FILE_NOTICE = "Upload a balance file first."
NOT_FILTERED_NOTICE = "Filter the file before downloading."
EMPTY_NICKNAMES_WARNING = "No nicknames added. The filtered file will be empty."


class Session(BaseModel):
    """Everything one user has uploaded and produced so far."""

    filename: Optional[str] = None
    workbook: Optional[Workbook] = None
    name_filename: Optional[str] = None
    name_mapping: dict[str, str] = Field(default_factory=dict)
    nicknames: list[NicknameEntry] = Field(default_factory=list)
    filtered: Optional[Sheet] = None
    is_processing: bool = False
    notice: Optional[str] = None

    @property
    def is_filtered(self) -> bool:
        return self.filtered is not None

    @property
    def nickname_text(self) -> str:
        return format_nicknames(self.nicknames)


class BusyError(Exception):
    """An action was started while another was still running."""


@contextmanager
def _processing(session: Session):
    if session.is_processing:
        raise BusyError()
    session.is_processing = True
    try:
        yield
    finally:
        session.is_processing = False


def upload_balance_file(session: Session, filename: str, data: bytes) -> bool:
    """Read an uploaded balance workbook and make it the current file."""
    try:
        workbook = read_workbook(data)
    except BalanceFilterError:
        log.exception("Error reading file %s", filename)
        session.notice = READ_ERROR_NOTICE
        return False
    session.filename = filename
    session.workbook = workbook
    session.filtered = None
    session.notice = None
    return True


def upload_name_file(session: Session, filename: str, data: bytes) -> bool:
    """Load the nickname to name mapping from a reference workbook."""
    try:
        mapping = read_name_file(read_workbook(data))
    except BalanceFilterError:
        log.exception("Error reading name file %s", filename)
        session.notice = NAME_FILE_ERROR_NOTICE
        return False
    session.name_filename = filename
    session.name_mapping = mapping
    session.notice = None
    return True


def set_nickname_text(session: Session, text: str):
    """Replace the nickname list with the entries parsed from ``text``."""
    session.nicknames = parse_nicknames(text)
    if not session.nicknames:
        session.notice = EMPTY_NICKNAMES_WARNING


def run_filter(session: Session) -> bool:
    """Filter the uploaded workbook by the current nicknames."""
    if session.workbook is None:
        session.notice = NO_FILE_NOTICE
        return False

    try:
        with _processing(session):
            filtered = filter_workbook(session.workbook, session.nicknames, session.name_mapping)
    except BusyError:
        session.notice = BUSY_NOTICE
        return False
    except (BalanceFilterError, ArithmeticError, ValueError, TypeError):
        log.exception("Error filtering file %s", session.filename)
        session.notice = FILTER_ERROR_NOTICE
        return False

    session.filtered = filtered
    session.notice = f"Filtered {len(session.nicknames)} nickname(s)"
    return True


def download(session: Session, filepath: Optional[str] = None) -> Optional[tuple[str, bytes]]:
    """Render the filtered sheet.

    Returns:
        ``(filename, data)`` for the download, or None if it failed.
    """
    if session.filtered is None:
        session.notice = NOT_FILTERED_NOTICE
        return None

    try:
        with _processing(session):
            data = write_filtered_workbook(session.filtered, filepath)
    except BusyError:
        session.notice = BUSY_NOTICE
        return None
    except (OSError, ValueError, TypeError):
        log.exception("Error writing filtered file for %s", session.filename)
        session.notice = DOWNLOAD_ERROR_NOTICE
        return None

    return filtered_filename(session.filename), data


def reset_filter(session: Session):
    """Discard the filtered result so the file can be filtered again."""
    session.filtered = None
    session.notice = None
