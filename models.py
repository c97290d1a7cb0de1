from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


def as_date(value) -> date:
    # datetime является подклассом date: оставляем только день
    if isinstance(value, datetime):
        return value.date()
    return value


class SelectionPhase(Enum):
    EMPTY = "empty"
    PENDING_END = "pending_end"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SelectionState:
    # end без start не бывает, start <= end
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start is not None:
            object.__setattr__(self, "start", as_date(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", as_date(self.end))

        if self.end is not None and self.start is None:
            raise ValueError("selection end set without a start")
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError(f"selection end {self.end} is before start {self.start}")

    @property
    def phase(self) -> SelectionPhase:
        if self.start is None:
            return SelectionPhase.EMPTY
        if self.end is None:
            return SelectionPhase.PENDING_END
        return SelectionPhase.COMPLETE


@dataclass(frozen=True)
class Cell:
    date: date
    is_outside_month: bool
    is_today: bool
    is_selected_start: bool
    is_in_range: bool

    @property
    def disabled(self) -> bool:
        return self.is_outside_month
