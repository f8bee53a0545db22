"""Data models for nickname entries and matched balance rows."""

import math
from typing import Optional, Union

from pydantic import BaseModel, computed_field

POSITIVE_MESSAGE = "Hei🙂 Saldo er {profit_loss}, hva vil du gjøre?"
NEGATIVE_MESSAGE = "Hei🙂 Saldo er {profit_loss}, mer info kommer"


class NicknameEntry(BaseModel):
    """A nickname with an optional line, in whole currency units."""

    nickname: str
    line: Optional[float] = None


class MatchedRow(BaseModel):
    """A balance row that matched a nickname entry."""

    source_nickname: Optional[Union[str, int, float]] = None
    resolved_name: str = ""
    line_amount: Optional[Union[int, float]] = None
    balance: Union[int, float]
    # Column L as it appears in the source sheet
    chips: Optional[Union[str, int, float]] = None
    profit_loss: int

    @computed_field
    @property
    def has_line(self) -> bool:
        return self.line_amount is not None

    @computed_field
    @property
    def message(self) -> str:
        """Fixed notification text for the player."""
        template = NEGATIVE_MESSAGE if self.profit_loss < 0 else POSITIVE_MESSAGE
        return template.format(profit_loss=self.profit_loss)

    @classmethod
    def from_match(
        cls,
        source_nickname: Optional[Union[str, int, float]],
        entry: NicknameEntry,
        balance: Union[int, float],
        resolved_name: str = "",
        chips: Optional[Union[str, int, float]] = None,
    ) -> "MatchedRow":
        """Build a matched row, computing profit/loss truncated toward zero."""
        if entry.line is not None:
            profit_loss = math.trunc(balance - entry.line)
        else:
            profit_loss = math.trunc(balance)
        return cls(
            source_nickname=source_nickname,
            resolved_name=resolved_name,
            line_amount=entry.line,
            balance=balance,
            chips=chips,
            profit_loss=profit_loss,
        )

    def to_cells(self) -> list:
        """Cells of the 12-column main table; columns 6-10 stay blank."""
        return [
            self.source_nickname,
            self.resolved_name,
            self.line_amount,
            self.chips,
            "Yes" if self.has_line else "No",
            self.profit_loss,
            None,
            None,
            None,
            None,
            None,
            self.message,
        ]
