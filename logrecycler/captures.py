"""Named capture extraction shared by preprocess, glog and rule matching."""

import re

from logrecycler.record import OrderedRecord


def group_names(pattern: re.Pattern) -> list[str]:
    """Named groups of *pattern* in declaration order, without running it."""
    return sorted(pattern.groupindex, key=pattern.groupindex.__getitem__)


def store_captures(pattern: re.Pattern, subject: str, record: OrderedRecord) -> bool:
    """Search *subject* and copy participating named groups into *record*.

    Returns False (record untouched) when the pattern does not match.
    """
    m = pattern.search(subject)
    if m is None:
        return False
    for name, value in m.groupdict().items():
        if value is not None:
            record.set(name, value)
    return True
