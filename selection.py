import logging
from datetime import date

from models import SelectionPhase, SelectionState, as_date

logger = logging.getLogger(__name__)

EMPTY = SelectionState()


def select(state: SelectionState, clicked: date) -> SelectionState:
    """Следующее состояние выбора после клика по ``clicked``.

    Первый клик задаёт начало, второй конец, третий начинает заново.
    Второй клик раньше начала переносит начало, а не завершает диапазон;
    повторный клик по началу даёт диапазон в один день.
    """
    clicked = as_date(clicked)

    if state.phase is SelectionPhase.PENDING_END:
        if clicked < state.start:
            logger.debug("re-anchor selection %s -> %s", state.start, clicked)
            return SelectionState(start=clicked)
        logger.debug("complete selection %s..%s", state.start, clicked)
        return SelectionState(start=state.start, end=clicked)

    # EMPTY или COMPLETE
    logger.debug("start selection at %s", clicked)
    return SelectionState(start=clicked)


def is_selected_start(state: SelectionState, day: date) -> bool:
    return state.phase is SelectionPhase.PENDING_END and as_date(day) == state.start


def is_in_range(state: SelectionState, day: date) -> bool:
    if state.phase is not SelectionPhase.COMPLETE:
        return False
    return state.start <= as_date(day) <= state.end


def duration(state: SelectionState) -> tuple[int, int]:
    if state.phase is not SelectionPhase.COMPLETE:
        raise ValueError(f"duration needs a complete selection, got {state.phase.value}")
    nights = (state.end - state.start).days
    return nights + 1, nights
