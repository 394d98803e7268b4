"""Log counter and the record → metric adapters for both sinks."""

from prometheus_client import CollectorRegistry, Counter

from logrecycler.record import OrderedRecord

LOGS_METRIC = "logs"  # exposed as logs_total
LOGS_HELP = "Total number of logs received"


def label_values(record: OrderedRecord, schema: tuple[str, ...]) -> list[str]:
    """Positional values matching *schema*; missing fields become ""."""
    return [record.get(name, "") for name in schema]


def statsd_tags(record: OrderedRecord, message_key: str) -> list[str]:
    """``name:value`` tags for every field except the message."""
    return [f"{k}:{v}" for k, v in record.items() if k != message_key]


def build_log_counter(schema: tuple[str, ...]) -> tuple[CollectorRegistry, Counter]:
    """Counter on a private registry (no process/platform collectors).

    Raises ValueError for label names Prometheus does not accept.
    """
    registry = CollectorRegistry()
    counter = Counter(LOGS_METRIC, LOGS_HELP, labelnames=schema, registry=registry)
    return registry, counter


def count_log(counter: Counter, values: list[str]) -> None:
    """Increment the series for *values*; a wrong number of values raises ValueError."""
    if values:
        counter.labels(*values).inc()
    else:
        counter.inc()
