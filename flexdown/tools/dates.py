"""Built-in date tools. All values are UTC.

Each tool reads the current time, or the moment given as its first argument:
a datetime, an ISO 8601 string or a Unix timestamp in seconds.

@chrono and @diff describe how long ago a moment was ("5 minutes ago"),
in English or French. @fresh tells whether a moment is recent enough.
"""

from datetime import datetime, timedelta, timezone

from . import Tools

RELATIVE_TEMPLATES = {
    "en": {
        "now": "just now",
        "second": "{n} second{s} ago",
        "minute": "{n} minute{s} ago",
        "hour": "{n} hour{s} ago",
        "day": "{n} day{s} ago",
        "month": "{n} month{s} ago",
        "year": "{n} year{s} ago",
    },
    "fr": {
        "now": "à l'instant",
        "second": "il y a {n} seconde{s}",
        "minute": "il y a {n} minute{s}",
        "hour": "il y a {n} heure{s}",
        "day": "il y a {n} jour{s}",
        "month": "il y a {n} mois",
        "year": "il y a {n} an{s}",
    },
}


def _moment(value=None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, timezone.utc)
    elif isinstance(value, str):
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Invalid date: {value!r}")
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@Tools.register("year")
def year(value=None) -> int:
    return _moment(value).year


@Tools.register("month")
def month(value=None) -> int:
    return _moment(value).month


@Tools.register("day")
def day(value=None) -> int:
    return _moment(value).day


@Tools.register("hour")
def hour(value=None) -> int:
    return _moment(value).hour


@Tools.register("minute")
def minute(value=None) -> int:
    return _moment(value).minute


@Tools.register("second")
def second(value=None) -> int:
    return _moment(value).second


@Tools.register("date")
def date(value=None) -> str:
    """'YYYY-MM-DD'"""
    return _moment(value).strftime("%Y-%m-%d")


@Tools.register("time")
def time(value=None) -> str:
    """'HH:MM:SS'"""
    return _moment(value).strftime("%H:%M:%S")


def _ago(value, lang: str) -> str:
    template = RELATIVE_TEMPLATES.get(lang, RELATIVE_TEMPLATES["en"])

    try:
        moment = _moment(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return template["now"]

    seconds = int((datetime.now(timezone.utc) - moment).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    months = days // 30
    years = months // 12

    for unit, count in (
        ("year", years),
        ("month", months),
        ("day", days),
        ("hour", hours),
        ("minute", minutes),
        ("second", seconds),
    ):
        if count > 0:
            return template[unit].format(n=count, s="s" if count > 1 else "")

    # future moments and the present alike
    return template["now"]


@Tools.register("chrono")
def chrono(value=None, lang: str = "en") -> str:
    """How long ago ``value`` was: '5 minutes ago', 'il y a 2 jours'.

    Unreadable dates and moments in the future give 'just now'. Months are
    30 days. Unknown languages fall back to English.
    """
    return _ago(value, lang)


@Tools.register("diff")
def diff(value=None, lang: str = "en") -> str:
    return _ago(value, lang)


@Tools.register("fresh")
def fresh(value, hours=24) -> bool:
    """True unless ``value`` is more than ``hours`` in the past."""
    return datetime.now(timezone.utc) - _moment(value) <= timedelta(hours=hours)
