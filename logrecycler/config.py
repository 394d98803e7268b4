"""Configuration loading from a YAML file into frozen, pre-compiled rules."""

import logging
import os
import re
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "logrecycler.yaml"
CONFIG_PATH_ENV = "LOGRECYCLER_CONFIG"


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass(frozen=True)
class Rule:
    regex: re.Pattern
    discard: bool = False
    add: tuple[tuple[str, str], ...] = ()  # (key, value) in configured order
    level: str = ""


@dataclass(frozen=True)
class Config:
    message_key: str = "message"
    timestamp_key: str = ""
    level_key: str = ""
    preprocess: re.Pattern | None = None
    glog: bool = False
    patterns: tuple[Rule, ...] = field(default_factory=tuple)
    prometheus_port: int | None = None
    statsd_address: str = ""
    statsd_metric: str = "logs_total"

    @property
    def prometheus(self) -> bool:
        return self.prometheus_port is not None

    @property
    def statsd(self) -> bool:
        return bool(self.statsd_address)


def resolve_config_path(cli_path: str | None = None) -> str:
    """CLI flag wins, then the LOGRECYCLER_CONFIG env var, then the default file."""
    if cli_path:
        return cli_path
    return os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)


def load_yaml_config(path: str) -> dict:
    """Read the YAML document at *path*. An empty file yields an empty dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    logger.info("Loaded config from %s", path)
    return data


def _compile(pattern, where: str) -> re.Pattern:
    if not isinstance(pattern, str) or not pattern:
        raise ConfigError(f"{where}: regex must be a non-empty string")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"{where}: invalid regex {pattern!r}: {e}") from e


def _string(data: dict, key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigError(f"{key} must be a string, got {type(value).__name__}")
    return str(value)


def _enabled(value) -> bool:
    """On for ``true`` or any string other than ``false``/``no``/``0`` (e.g. ``glog: simple``)."""
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "no", "0")
    return bool(value)


def _scalar(value) -> str:
    """YAML scalar as text; booleans keep their YAML spelling."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_rule(raw, index: int) -> Rule:
    where = f"patterns[{index}]"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")
    if "regex" not in raw:
        raise ConfigError(f"{where}: missing 'regex'")

    add = raw.get("add") or {}
    if not isinstance(add, dict):
        raise ConfigError(f"{where}: 'add' must be a mapping")

    level = raw.get("level") or ""
    if not isinstance(level, str):
        raise ConfigError(f"{where}: 'level' must be a string")

    return Rule(
        regex=_compile(raw["regex"], where),
        discard=_enabled(raw.get("discard")),
        add=tuple((str(k), _scalar(v)) for k, v in add.items()),
        level=level,
    )


def _parse_port(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        port = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"prometheus_port must be a port number, got {value!r}") from e
    if not 0 <= port <= 65535:
        raise ConfigError(f"prometheus_port out of range: {port}")
    return port


def _check_statsd_address(address: str) -> str:
    if not address:
        return ""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ConfigError(f"statsd_address must be host:port, got {address!r}")
    return address


def load_config(data: dict) -> Config:
    """Build a Config from parsed YAML data, compiling every regex once."""
    raw_patterns = data.get("patterns") or []
    if not isinstance(raw_patterns, list):
        raise ConfigError("patterns must be a list")

    patterns = tuple(_parse_rule(raw, i) for i, raw in enumerate(raw_patterns))

    preprocess = None
    if data.get("preprocess"):
        preprocess = _compile(data["preprocess"], "preprocess")

    config = Config(
        message_key=_string(data, "message_key", Config.message_key) or Config.message_key,
        timestamp_key=_string(data, "timestamp_key"),
        level_key=_string(data, "level_key"),
        preprocess=preprocess,
        glog=_enabled(data.get("glog")),
        patterns=patterns,
        prometheus_port=_parse_port(data.get("prometheus_port")),
        statsd_address=_check_statsd_address(_string(data, "statsd_address")),
        statsd_metric=_string(data, "statsd_metric", Config.statsd_metric) or Config.statsd_metric,
    )

    if not config.level_key and any(rule.level for rule in patterns):
        logger.warning("Rules set 'level' but no level_key is configured; rule levels are ignored")
    return config
