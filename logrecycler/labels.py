"""Derives the fixed metric label set a configuration can ever produce."""

from logrecycler.captures import group_names
from logrecycler.config import Config


def derive_label_schema(config: Config) -> tuple[str, ...]:
    """All label names, first-seen order, deduplicated, without the message key.

    Discard rules never emit a record, so their fields are left out. ``add``
    keys are sorted so the order does not depend on how the YAML was written.
    """
    labels: list[str] = []

    if config.level_key:
        labels.append(config.level_key)

    if config.preprocess is not None:
        labels.extend(group_names(config.preprocess))

    for rule in config.patterns:
        if rule.discard:
            continue
        labels.extend(group_names(rule.regex))
        labels.extend(sorted(key for key, _ in rule.add))

    # dict keeps first occurrence order
    unique = dict.fromkeys(labels)
    unique.pop(config.message_key, None)  # message would make the metric useless
    return tuple(unique)
