import math
import re
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import List, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)")
_LEADING_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")


def parse_number(value) -> Optional[float]:
    """
    Lenient numeric parse for filter bounds.
    Anything that is not a finite number becomes None (no bound).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_leading_number(text: Optional[str]) -> Optional[float]:
    """
    Reads the number a free-text measurement starts with.
    Example: '450 g/m²' -> 450.0, 'heavy' -> None
    """
    if text is None:
        return None
    match = _LEADING_NUMBER_RE.match(str(text))
    if not match:
        return None
    return float(match.group(1))


def numbers_in(text: Optional[str]) -> List[float]:
    """All numbers in a free-text string. Example: '70 x 140 cm' -> [70.0, 140.0]"""
    if not text:
        return []
    return [float(m) for m in _NUMBER_RE.findall(str(text))]


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime_bound(value, end_of_day: bool = False) -> Optional[datetime]:
    """
    Lenient date/datetime parse for filter bounds.

    A date without a time is widened to the start of the day, or to its last
    instant when used as an upper bound. Unparseable input becomes None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)

    text = str(value).strip()
    if not text:
        return None
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end_of_day else time.min)
        return _to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None


def parse_choice(enum_cls: Type[E], value, fold: bool = False) -> Optional[E]:
    """
    Maps a raw selector value onto an enum member. 'all', blank or unknown -> None.

    Values must match a member exactly unless `fold` is set, in which case
    case and separators are ignored.
    """
    if value is None or isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    if not text or text.lower() == "all":
        return None
    try:
        return enum_cls(text)
    except ValueError:
        if not fold:
            return None
    # 'unitPrice', 'unit-price' and 'UNIT_PRICE' all name the same member
    folded = re.sub(r"[\s_-]", "", text.lower())
    for member in enum_cls:
        if re.sub(r"[\s_-]", "", str(member.value).lower()) == folded:
            return member
    return None
