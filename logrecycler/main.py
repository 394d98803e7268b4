#!/usr/bin/env python3
"""logrecycler — pipe logs in, get annotated JSON lines out."""

import argparse
import io
import logging
import sys

from logrecycler.config import ConfigError, load_config, load_yaml_config, resolve_config_path
from logrecycler.engine import Context, LineProcessor
from logrecycler.exposition import MetricsServer, create_metrics_app
from logrecycler.metrics import build_log_counter
from logrecycler.statsd import StatsdClient

logger = logging.getLogger(__name__)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logrecycler",
        description="Pipe logs to logrecycler; rules are read from logrecycler.yaml.",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to the YAML config (default: $LOGRECYCLER_CONFIG or ./logrecycler.yaml)",
    )
    return parser


def utf8_stream(stream, **kwargs) -> io.TextIOWrapper:
    """UTF-8 text view of a std stream regardless of locale; bad bytes become U+FFFD."""
    return io.TextIOWrapper(stream.buffer, encoding="utf-8", errors="replace", **kwargs)


def main(argv=None, stdin=None, stdout=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [LOGRECYCLER] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args = build_cli_parser().parse_args(argv)

    try:
        config = load_config(load_yaml_config(resolve_config_path(args.config)))
        ctx = Context.from_config(config)
        registry = counter = None
        if config.prometheus:
            registry, counter = build_log_counter(ctx.schema)
    except (ConfigError, ValueError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Config: %d rule(s), labels=%s, glog=%s",
                len(config.patterns), list(ctx.schema), config.glog)

    server = None
    statsd = None
    try:
        if registry is not None:
            server = MetricsServer(create_metrics_app(registry), port=config.prometheus_port)
        if config.statsd:
            statsd = StatsdClient(config.statsd_address)
    except OSError as e:
        logger.error("Cannot start metrics sinks: %s", e)
        if server is not None:
            server.stop()
        return 1

    # wrappers over sys.std*.buffer are detached afterwards so the real streams stay open
    owned = []
    if stdin is None:
        stdin = utf8_stream(sys.stdin)
        owned.append(stdin)
    if stdout is None:
        stdout = utf8_stream(sys.stdout, write_through=True)
        owned.append(stdout)

    processor = LineProcessor(ctx, stdout, counter=counter, statsd=statsd)
    try:
        if server is not None:
            server.start()
        processor.run(stdin)
    except (KeyboardInterrupt, BrokenPipeError):
        pass
    finally:
        for stream in owned:
            try:
                stream.detach()
            except BrokenPipeError:
                pass  # reader already gone
        if statsd is not None:
            statsd.close()
        if server is not None:
            server.stop()

    logger.info("Stats: %d lines processed, %d emitted, %d discarded",
                processor.processed, processor.emitted, processor.discarded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
