"""Форматирование для календаря: даты, заголовок месяца, текст подвала.

Для сравнения дат не используется, только для подписей.
"""
import logging
import re
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "zh-TW"

LOCALES = {
    "zh-TW": {
        "PP": "yyyy年M月d日",
        "months": [f"{m}月" for m in range(1, 13)],
        "weekdays": ["週一", "週二", "週三", "週四", "週五", "週六", "週日"],
        "prompt": "請選擇開始日期",
        "selected": "您選擇了 {start}",
        "until": " 到 {end}",
        "duration": "共 {total_days} 天 {nights} 夜",
    },
    "en": {
        "PP": "MMM d, yyyy",
        "months": ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                   "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
        "weekdays": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        "prompt": "Select a start date",
        "selected": "You selected {start}",
        "until": " to {end}",
        "duration": "Days: {total_days}, nights: {nights}",
    },
}

# длинные токены первыми, чтобы "MMM" не разобрался как "M"
_TOKEN_RE = re.compile(r"'[^']*'|PP|yyyy|MMM|MM|M|dd|d|EEE")


def resolve_locale(name: Optional[str]) -> str:
    if not name:
        return DEFAULT_LOCALE
    if name in LOCALES:
        return name
    # допускаем написание вида zh_TW, EN
    normalized = name.replace("_", "-")
    for known in LOCALES:
        if known.lower() == normalized.lower():
            return known
    logger.warning("Unknown locale %r, falling back to %s", name, DEFAULT_LOCALE)
    return DEFAULT_LOCALE


def format_date(d: date, pattern: str, locale: Optional[str] = None) -> str:
    """Форматирует ``d`` по шаблону в стиле date-fns.

    Токены: ``yyyy``, ``M``, ``MM``, ``MMM``, ``d``, ``dd``, ``EEE`` и ``PP``
    (длинная дата в локали). Текст в одинарных кавычках и прочие символы
    копируются как есть.
    """
    data = LOCALES[resolve_locale(locale)]

    def substitute(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith("'"):
            return token[1:-1]
        if token == "PP":
            return format_date(d, data["PP"], locale)
        if token == "yyyy":
            return f"{d.year:04d}"
        if token == "MMM":
            return data["months"][d.month - 1]
        if token == "MM":
            return f"{d.month:02d}"
        if token == "M":
            return str(d.month)
        if token == "dd":
            return f"{d.day:02d}"
        if token == "d":
            return str(d.day)
        return data["weekdays"][d.weekday()]

    return _TOKEN_RE.sub(substitute, pattern)


def format_duration(total_days: int, nights: int, locale: Optional[str] = None) -> str:
    return LOCALES[resolve_locale(locale)]["duration"].format(total_days=total_days, nights=nights)


def message(key: str, locale: Optional[str] = None, **values) -> str:
    return LOCALES[resolve_locale(locale)][key].format(**values)
