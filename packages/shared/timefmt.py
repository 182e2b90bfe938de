from __future__ import annotations

import re
from datetime import timedelta

_HMS_FORM = re.compile(r"^(\d+[hHmMsS]\s?)+$")
_COLON_FORM = re.compile(r"^(\d+):(\d+):(\d+)$")
_HMS_TOKEN = re.compile(r"(\d+)([hHmMsS])")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def parse_duration(text: str) -> timedelta:
    """
    Parse "1h 30m", "2h30m15s", "1h 1h 10m" (tokens are summed) or "1:30:00".
    Raises ValueError on anything else.
    """
    s = text.strip()
    m = _COLON_FORM.match(s)
    if m:
        hours, minutes, seconds = (int(g) for g in m.groups())
        return timedelta(hours=hours, minutes=minutes, seconds=seconds)
    if s and _HMS_FORM.match(s):
        total = sum(int(n) * _UNIT_SECONDS[unit.lower()] for n, unit in _HMS_TOKEN.findall(s))
        return timedelta(seconds=total)
    raise ValueError(f"invalid duration {text!r} (expected e.g. '1h 30m' or '1:30:00')")


def format_duration(d: timedelta) -> str:
    total = int(d.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h {minutes:02d}m"
    if minutes:
        return f"{sign}{minutes}m" if not seconds else f"{sign}{minutes}m {seconds:02d}s"
    return f"{sign}{seconds}s"
