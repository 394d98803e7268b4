"""End-to-end tests for the CLI entry point."""

import io
import json

import pytest
import yaml

from logrecycler.main import main


def _config(tmp_path, data):
    path = tmp_path / "logrecycler.yaml"
    path.write_text(yaml.dump(data, sort_keys=False), encoding="utf-8")
    return str(path)


def _run(argv, lines):
    out = io.StringIO()
    code = main(argv, stdin=io.StringIO("".join(f"{l}\n" for l in lines)), stdout=out)
    return code, [json.loads(l) for l in out.getvalue().splitlines()]


class TestMain:
    def test_annotates_stdin(self, tmp_path):
        path = _config(tmp_path, {
            "timestamp_key": "time",
            "level_key": "level",
            "glog": "simple",
            "patterns": [
                {"regex": "health", "discard": True},
                {"regex": r"user (?P<user>\w+)", "add": {"event": "login"}},
            ],
        })
        code, records = _run(["--config", path], [
            "I0512 10:30:01.123456 123 file.go:10] hello",
            "GET /health",
            "W0101 00:00:00.1 7 main.go:3] user bob",
        ])

        assert code == 0
        assert len(records) == 2
        assert records[0]["level"] == "INFO"
        assert records[0]["message"] == "hello"
        assert list(records[1].keys()) == ["time", "level", "message", "user", "event"]
        assert records[1]["level"] == "WARN"
        assert records[1]["user"] == "bob"

    def test_invalid_utf8_is_replaced_not_fatal(self, tmp_path, monkeypatch):
        path = _config(tmp_path, {})
        # same strict decoder sys.stdin gets from the locale
        raw = io.TextIOWrapper(io.BytesIO(b"good\nbad \xff byte\nafter\n"), encoding="utf-8", errors="strict")
        monkeypatch.setattr("sys.stdin", raw)
        out = io.StringIO()

        code = main(["--config", path], stdout=out)

        records = [json.loads(l) for l in out.getvalue().splitlines()]
        assert code == 0
        assert [r["message"] for r in records] == ["good", "bad \ufffd byte", "after"]

    def test_config_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOGRECYCLER_CONFIG", _config(tmp_path, {"message_key": "msg"}))
        code, records = _run([], ["plain"])
        assert code == 0
        assert records == [{"msg": "plain"}]

    def test_statsd_sink(self, tmp_path):
        import socket
        recv = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        recv.bind(("127.0.0.1", 0))
        recv.settimeout(5.0)
        host, port = recv.getsockname()
        try:
            path = _config(tmp_path, {"level_key": "level", "statsd_address": f"{host}:{port}"})
            code, _ = _run(["--config", path], ["hi"])
            data, _ = recv.recvfrom(65536)
        finally:
            recv.close()
        assert code == 0
        assert data == b"logs_total:1|c|#level:INFO"

    def test_prometheus_sink_starts_and_stops(self, tmp_path):
        path = _config(tmp_path, {"level_key": "level", "prometheus_port": 0})
        code, records = _run(["--config", path], ["a", "b"])
        assert code == 0
        assert len(records) == 2

    def test_invalid_regex_exits_1(self, tmp_path):
        path = _config(tmp_path, {"patterns": [{"regex": "(bad"}]})
        code, records = _run(["--config", path], ["x"])
        assert code == 1
        assert records == []

    def test_reserved_label_name_exits_1(self, tmp_path):
        path = _config(tmp_path, {
            "prometheus_port": 0,
            "patterns": [{"regex": "x", "add": {"__bad": "1"}}],
        })
        code, _ = _run(["--config", path], ["x"])
        assert code == 1

    def test_missing_config_exits_1(self, tmp_path):
        code, _ = _run(["--config", str(tmp_path / "missing.yaml")], ["x"])
        assert code == 1

    def test_unknown_flag(self):
        with pytest.raises(SystemExit) as exc:
            main(["--bogus"])
        assert exc.value.code == 2

    def test_help(self):
        with pytest.raises(SystemExit) as exc:
            main(["--help"])
        assert exc.value.code == 0
