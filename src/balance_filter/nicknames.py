"""Parsing and formatting of the free-form nickname list.

One entry per line, either ``nickname`` or ``nickname/line``. Lines are
entered in thousands and accept ``.`` or ``,`` as the decimal separator:

    gus          -> NicknameEntry(nickname="gus", line=None)
    gus/5        -> NicknameEntry(nickname="gus", line=5000)
    gus/4,728    -> NicknameEntry(nickname="gus", line=4728)
"""

import logging
import math
import re
from typing import Optional

from .models import NicknameEntry

log = logging.getLogger(__name__)

LINE_SCALE = 1000

# Plain decimal number; a lenient parse uses its leading match, so "4.5k" reads as 4.5
DECIMAL_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_line(spec: str) -> Optional[float]:
    match = DECIMAL_NUMBER.match(spec.replace(",", ".", 1))
    if match is None:
        return None
    value = float(match.group()) * LINE_SCALE
    if not math.isfinite(value):
        return None
    return value


def parse_nicknames(text: str) -> list[NicknameEntry]:
    """Parse nickname text into entries, preserving line order.

    Malformed line specs are not an error: the entry is kept without a
    line. Lines with nothing before the ``/`` are dropped.
    """
    entries = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue

        if "/" not in line:
            entries.append(NicknameEntry(nickname=line))
            continue

        nickname, spec = (part.strip() for part in line.split("/", 1))
        if not nickname:
            log.debug("Dropping %r: no nickname before '/'", line)
            continue

        value = _parse_line(spec)
        if value is None:
            log.debug("Ignoring malformed line %r for %s", spec, nickname)
        entries.append(NicknameEntry(nickname=nickname, line=value))
    return entries


def _format_line(line: float) -> str:
    value = round(line / LINE_SCALE, 9)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_nicknames(entries: list[NicknameEntry]) -> str:
    """Render entries back to text, lines divided back into thousands."""
    lines = []
    for entry in entries:
        if entry.line is None:
            lines.append(entry.nickname)
        else:
            lines.append(f"{entry.nickname}/{_format_line(entry.line)}")
    return "\n".join(lines)
