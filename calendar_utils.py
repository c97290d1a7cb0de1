import calendar
import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from formatting import format_date, format_duration, message, resolve_locale
from models import Cell, SelectionPhase, SelectionState, as_date
from selection import EMPTY, duration, is_in_range, is_selected_start, select

logger = logging.getLogger(__name__)

# Протокол callback: CAL|<год>|<месяц>, DAY|<iso>, IGNORE
CB_NAV = "CAL"
CB_DAY = "DAY"
CB_IGNORE = "IGNORE"

WEEK_DAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
WEEK_START = 6  # воскресенье в нумерации date.weekday()

MONTH_TITLE = "yyyy年M月"
DAY_LABEL = "d"


# ——— Арифметика месяцев ——————————————————————————————————
def first_of_month(d: date) -> date:
    return as_date(d).replace(day=1)


def last_of_month(d: date) -> date:
    d = as_date(d)
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def next_month(anchor: date) -> date:
    return last_of_month(anchor) + timedelta(days=1)


def prev_month(anchor: date) -> date:
    return first_of_month(first_of_month(anchor) - timedelta(days=1))


def month_key(d: date) -> tuple[int, int]:
    return d.year, d.month


def start_of_week(d: date) -> date:
    return d - timedelta(days=(d.weekday() - WEEK_START) % 7)


def end_of_week(d: date) -> date:
    return start_of_week(d) + timedelta(days=6)


# ——— Сетка ——————————————————————————————————
class MonthGrid:
    """Подряд идущие даты, покрывающие целые недели (вс..сб) одного месяца.

    Итерация ленивая и повторяемая, между проходами ничего не кэшируется.
    """

    def __init__(self, reference_month: date):
        self.first = first_of_month(reference_month)
        self.last = last_of_month(reference_month)
        self.start = start_of_week(self.first)
        self.end = end_of_week(self.last)

    def __iter__(self) -> Iterator[date]:
        d = self.start
        while d <= self.end:
            yield d
            d += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __eq__(self, other):
        if not isinstance(other, MonthGrid):
            return NotImplemented
        return (self.start, self.end, self.first) == (other.start, other.end, other.first)

    def __repr__(self):
        return f"MonthGrid({self.first.year}-{self.first.month:02d})"

    def in_month(self, d: date) -> bool:
        return self.first <= as_date(d) <= self.last

    def weeks(self) -> Iterator[list[date]]:
        row = []
        for d in self:
            row.append(d)
            if len(row) == 7:
                yield row
                row = []


def build_grid(reference_month: date) -> MonthGrid:
    return MonthGrid(reference_month)


def render(reference_month: date, state: SelectionState, today: Optional[date] = None) -> list[list[Cell]]:
    today = as_date(today) if today is not None else date.today()
    grid = build_grid(reference_month)
    return [
        [
            Cell(
                date=d,
                is_outside_month=not grid.in_month(d),
                is_today=d == today,
                is_selected_start=is_selected_start(state, d),
                is_in_range=is_in_range(state, d),
            )
            for d in week
        ]
        for week in grid.weeks()
    ]


# ——— Оболочка календаря ——————————————————————————————————
class CalendarView:
    def __init__(self, month: Optional[date] = None, selection: SelectionState = EMPTY,
                 locale: Optional[str] = None):
        self.month = as_date(month) if month is not None else date.today()
        self.selection = selection
        self.locale = resolve_locale(locale)

    def show_month(self, year: int, month: int):
        self.month = date(year, month, 1)
        logger.debug("navigate to %s", self.month)

    def show_next_month(self):
        self.show_month(*month_key(next_month(self.month)))

    def show_prev_month(self):
        self.show_month(*month_key(prev_month(self.month)))

    def on_select(self, day: date):
        # клик мог прийти со старого сообщения: показываем месяц кликнутого дня
        day = as_date(day)
        if not build_grid(self.month).in_month(day):
            self.month = first_of_month(day)
        self.selection = select(self.selection, day)

    def clear(self):
        self.selection = EMPTY

    def cells(self, today: Optional[date] = None) -> list[list[Cell]]:
        return render(self.month, self.selection, today)

    def title(self) -> str:
        return format_date(self.month, MONTH_TITLE, self.locale)

    def footer(self) -> str:
        state = self.selection
        if state.phase is SelectionPhase.EMPTY:
            return message("prompt", self.locale)

        text = message("selected", self.locale, start=format_date(state.start, "PP", self.locale))
        if state.phase is SelectionPhase.PENDING_END:
            return text

        text += message("until", self.locale, end=format_date(state.end, "PP", self.locale))
        total_days, nights = duration(state)
        return f"{text}\n{format_duration(total_days, nights, self.locale)}"


def cell_label(cell: Cell, locale: Optional[str] = None) -> str:
    txt = format_date(cell.date, DAY_LABEL, locale)
    if cell.is_outside_month:
        return f"~{txt}~"
    if cell.is_selected_start:
        return f"🟢{txt}"
    if cell.is_in_range:
        return f"🟩{txt}"
    if cell.is_today:
        return f"•{txt}"
    return txt


def build_calendar(view: CalendarView, today: Optional[date] = None) -> InlineKeyboardMarkup:
    # Навигационная шапка
    prev_year, prev_m = month_key(prev_month(view.month))
    next_year, next_m = month_key(next_month(view.month))

    header = [
        InlineKeyboardButton("◀", callback_data=f"{CB_NAV}|{prev_year}|{prev_m}"),
        InlineKeyboardButton(view.title(), callback_data=CB_IGNORE),
        InlineKeyboardButton("▶", callback_data=f"{CB_NAV}|{next_year}|{next_m}"),
    ]

    # Дни недели, с воскресенья
    rows = [[InlineKeyboardButton(w, callback_data=CB_IGNORE) for w in WEEK_DAYS]]

    # Заполнение чисел: чужой месяц виден, но не кликается
    for week in view.cells(today):
        row = []
        for cell in week:
            data = CB_IGNORE if cell.disabled else f"{CB_DAY}|{cell.date.isoformat()}"
            row.append(InlineKeyboardButton(cell_label(cell, view.locale), callback_data=data))
        rows.append(row)

    return InlineKeyboardMarkup([header] + rows)
