"""Per-line rule engine: seed → preprocess → glog → first matching rule → emit.

Everything in ``process_line`` runs once per input line, so it only touches
pre-compiled state held on the immutable Context.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, TextIO

from prometheus_client import Counter

from logrecycler.captures import store_captures
from logrecycler.config import Config
from logrecycler.glog import now_timestamp, parse_glog
from logrecycler.labels import derive_label_schema
from logrecycler.metrics import count_log, label_values, statsd_tags
from logrecycler.record import OrderedRecord
from logrecycler.statsd import StatsdClient

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = "INFO"


@dataclass(frozen=True)
class Context:
    config: Config
    schema: tuple[str, ...]

    @classmethod
    def from_config(cls, config: Config) -> "Context":
        return cls(config=config, schema=derive_label_schema(config))


def process_line(line: str, ctx: Context) -> OrderedRecord | None:
    """Annotate one line. Returns None when a discard rule matched."""
    config = ctx.config
    message_key = config.message_key

    # seed; also fixes the output key order
    record = OrderedRecord()
    if config.timestamp_key:
        record.set(config.timestamp_key, now_timestamp())
    if config.level_key:
        record.set(config.level_key, DEFAULT_LEVEL)
    record.set(message_key, line)

    if config.preprocess is not None:
        store_captures(config.preprocess, record.get(message_key), record)

    if config.glog:
        parsed = parse_glog(record.get(message_key))
        if parsed is not None:
            message, level, timestamp = parsed
            record.set(message_key, message)
            if config.level_key:
                record.set(config.level_key, level)
            if config.timestamp_key and timestamp is not None:
                record.set(config.timestamp_key, timestamp)

    message = record.get(message_key)
    for rule in config.patterns:
        if rule.regex.search(message) is None:
            continue
        if rule.discard:
            return None
        if rule.level and config.level_key:
            record.set(config.level_key, rule.level)
        store_captures(rule.regex, message, record)
        for key, value in rule.add:
            record.set(key, value)
        break  # a line can only match one rule

    return record


class LineProcessor:
    """Runs the engine over input lines and feeds the enabled sinks."""

    def __init__(
        self,
        ctx: Context,
        output: TextIO,
        counter: Counter | None = None,
        statsd: StatsdClient | None = None,
    ):
        self._ctx = ctx
        self._output = output
        self._counter = counter
        self._statsd = statsd
        self.processed = 0
        self.emitted = 0
        self.discarded = 0

    def handle(self, line: str) -> OrderedRecord | None:
        self.processed += 1
        record = process_line(line, self._ctx)
        if record is None:
            self.discarded += 1
            return None

        if self._counter is not None:
            count_log(self._counter, label_values(record, self._ctx.schema))
        if self._statsd is not None:
            self._statsd.incr(
                self._ctx.config.statsd_metric,
                statsd_tags(record, self._ctx.config.message_key),
            )

        self._output.write(record.to_json() + "\n")
        self._output.flush()
        self.emitted += 1
        return record

    def run(self, lines: Iterable[str]) -> int:
        """Process every line in order; returns the number of records emitted."""
        for line in lines:
            self.handle(line.rstrip("\r\n"))
        return self.emitted
