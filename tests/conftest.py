"""Shared pytest fixtures for the logrecycler test suite."""

import io

import pytest

from logrecycler.config import load_config
from logrecycler.engine import Context, LineProcessor


@pytest.fixture()
def make_context():
    """Build a Context from YAML-shaped data, the same path the CLI uses."""
    def _make(**data) -> Context:
        return Context.from_config(load_config(data))
    return _make


@pytest.fixture()
def make_processor(make_context):
    """Return (processor, output) for a config given as keyword data."""
    def _make(counter=None, statsd=None, **data):
        output = io.StringIO()
        processor = LineProcessor(make_context(**data), output, counter=counter, statsd=statsd)
        return processor, output
    return _make
