"""Detector for the glog line prefix: ``Lmmdd hh:mm:ss.uuuuuu pid file:line] msg``."""

import re
from datetime import datetime, timezone

GLOG_RE = re.compile(
    r"^([IWEF])(\d{2})(\d{2}) (\d{2}):(\d{2}):(\d{2})\.\d+ \d+ \S+:\d+] "
)

GLOG_LEVELS = {
    "I": "INFO",
    "W": "WARN",
    "E": "ERROR",
    "F": "FATAL",
}


def format_timestamp(dt: datetime) -> str:
    """RFC 3339 with second precision; UTC renders as ``Z``."""
    text = dt.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


def now_timestamp() -> str:
    return format_timestamp(datetime.now().astimezone())


def _glog_time(m: re.Match) -> str | None:
    """Rebuild the timestamp from the prefix; glog carries no year, so use the current local one."""
    month, day, hour, minute, second = (int(g) for g in m.group(2, 3, 4, 5, 6))
    try:
        dt = datetime(
            datetime.now().year, month, day, hour, minute, second,
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None
    return format_timestamp(dt)


def parse_glog(message: str) -> tuple[str, str, str | None] | None:
    """Match a glog prefix on *message*.

    Returns ``(stripped_message, level, timestamp)`` or None if there is no
    prefix. ``timestamp`` is None for impossible dates such as ``I1332``.

    The prefix is removed with ``str.lstrip`` on the matched text, i.e. as a
    character set rather than an exact prefix. Message text starting with any
    character that also occurs in the prefix is trimmed too
    (``"...go:10] 1 item"`` loses the ``1``). Known quirk, kept for output
    compatibility.
    """
    m = GLOG_RE.match(message)
    if m is None:
        return None
    stripped = message.lstrip(m.group(0))
    return stripped, GLOG_LEVELS[m.group(1)], _glog_time(m)
