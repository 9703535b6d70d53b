"""
Rendering, filtering and destination tests.
"""

from __future__ import annotations

import socket
import sys

import orjson
import pytest
from structlog.testing import capture_logs

from logtree.errors import LogPanic
from logtree.formatters import TextFormatter, render_json, resolve_formatter
from logtree.hooks import HookRegistry
from logtree.levels import Level
from logtree.registry import Registry
from logtree.writers import FileWriter, SocketWriter, TeeWriter, resolve_writer


def json_lines(text: str) -> list[dict]:
    return [orjson.loads(line) for line in text.splitlines() if line]


@pytest.fixture
def json_root(capsys, hook_registry: HookRegistry):
    """JSON root node writing to the captured stdout."""
    registry = Registry(
        {"root": {"level": "info", "format": "json", "writer": "stdout", "hooks": {"name": "recorder"}}},
        hooks=hook_registry,
    )
    return registry.root()


class TestJsonOutput:
    def test_record_layout(self, json_root, capsys) -> None:
        json_root.info("hello", user="u1")
        (doc,) = json_lines(capsys.readouterr().out)
        assert list(doc)[:3] == ["time", "level", "msg"]
        assert doc["level"] == "info"
        assert doc["msg"] == "hello"
        assert doc["module"] == "root"
        assert doc["user"] == "u1"

    def test_below_level_is_dropped(self, json_root, capsys) -> None:
        json_root.debug("hidden")
        json_root.info("shown")
        assert [doc["msg"] for doc in json_lines(capsys.readouterr().out)] == ["shown"]
        assert [e["event"] for e in json_root.hooks[0].events] == ["shown"]

    def test_warn_alias(self, json_root, capsys) -> None:
        json_root.warn("careful")
        assert json_lines(capsys.readouterr().out)[0]["level"] == "warning"

    def test_child_fields_rendered(self, json_root, capsys) -> None:
        child = json_root.new("billing", {"tenant": "acme"})
        child.error("charge failed")
        doc = json_lines(capsys.readouterr().out)[0]
        assert doc["module"] == "billing"
        assert doc["tenant"] == "acme"

    def test_bind(self, json_root, capsys) -> None:
        json_root.bind(request_id="r-1").info("handled")
        assert json_lines(capsys.readouterr().out)[0]["request_id"] == "r-1"

    def test_exc_info(self, json_root, capsys) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            json_root.error("failed", exc_info=True)
        doc = json_lines(capsys.readouterr().out)[0]
        assert "ValueError: boom" in doc["exception"]

    def test_log_at_fatal_does_not_exit(self, json_root, capsys) -> None:
        json_root.log(Level.FATAL, "recorded")
        assert json_lines(capsys.readouterr().out)[0]["level"] == "fatal"


class TestFatalAndPanic:
    def test_fatal_logs_then_exits(self, json_root, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            json_root.fatal("cannot continue")
        assert exc_info.value.code == 1
        assert json_lines(capsys.readouterr().out)[0]["level"] == "fatal"

    def test_panic_logs_then_raises(self, json_root, capsys) -> None:
        with pytest.raises(LogPanic) as exc_info:
            json_root.panic("invariant broken", order=7)
        assert exc_info.value.event == "invariant broken"
        assert exc_info.value.details == {"module": "root", "order": 7}
        assert json_lines(capsys.readouterr().out)[0]["level"] == "panic"


class TestHookDispatch:
    def test_hooks_receive_event_copies(self, json_root, capsys) -> None:
        json_root.info("first", n=1)
        json_root.error("second")
        events = json_root.hooks[0].events
        assert [e["event"] for e in events] == ["first", "second"]
        assert events[0]["module"] == "root"
        assert events[0]["n"] == 1

    def test_hook_levels_filter(self, hook_registry: HookRegistry, capsys) -> None:
        registry = Registry(
            {"root": {"writer": "stdout", "hooks": {"name": "recorder", "levels": ["error", "fatal"]}}},
            hooks=hook_registry,
        )
        root = registry.root()
        root.info("ignored")
        root.error("kept")
        assert [e["event"] for e in root.hooks[0].events] == ["kept"]

    def test_failing_hook_does_not_break_logging(self, hook_registry: HookRegistry, capsys) -> None:
        registry = Registry(
            {"root": {"format": "json", "writer": "stdout", "hooks": {"name": "exploding"}}},
            hooks=hook_registry,
        )
        registry.root().info("still written")
        captured = capsys.readouterr()
        assert json_lines(captured.out)[0]["msg"] == "still written"
        assert "Failed to fire hook exploding: collector unavailable" in captured.err

    def test_replacing_hook_is_only_output(self, hook_registry: HookRegistry, capsys) -> None:
        registry = Registry(
            {"root": {"writer": "stdout", "hooks": {"name": "recorder", "replace": True}}},
            hooks=hook_registry,
        )
        root = registry.root()
        root.info("to the hook")
        assert capsys.readouterr().out == ""
        assert len(root.hooks[0].events) == 1


class TestTextOutput:
    def test_columns(self, capsys) -> None:
        root = Registry({"root": {"writer": "stdout"}}).root()
        root.new("payments", {"region": "eu"}).info("settled", amount=10)
        line = capsys.readouterr().out.rstrip("\n")
        timestamp, level, module, message = line.split(" | ")
        assert len(timestamp) == 19
        assert level.strip() == "INFO"
        assert module.strip() == "payments"
        assert message == "settled region=eu amount=10"

    def test_long_module_is_truncated_from_the_left(self) -> None:
        formatter = TextFormatter()
        line = formatter(None, "info", {"event": "x", "level": "info", "module": "a" * 40})
        module = line.split(" | ")[2]
        assert len(module) == TextFormatter.MODULE_WIDTH
        assert module.startswith("...")

    def test_colors_only_when_requested(self) -> None:
        event = {"event": "x", "level": "error", "module": "m", "k": "v"}
        assert "\x1b[" not in TextFormatter()(None, "error", dict(event))
        assert "\x1b[31m" in TextFormatter(use_color=True)(None, "error", dict(event))


class TestFormatterResolution:
    def test_known_formats(self) -> None:
        assert resolve_formatter("json") == ("json", render_json)
        assert resolve_formatter(None)[0] == "text"
        assert resolve_formatter("text")[0] == "text"

    def test_unknown_format_falls_back_to_text(self) -> None:
        with capture_logs() as logs:
            name, renderer = resolve_formatter("xml")
        assert name == "text"
        assert isinstance(renderer, TextFormatter)
        assert logs[0]["format"] == "xml"


class TestWriters:
    def test_nothing_resolves_to_stderr(self) -> None:
        assert resolve_writer(None) is sys.stderr
        assert resolve_writer({}) is sys.stderr
        assert resolve_writer({"unknown": 1}) is sys.stderr

    def test_named_streams(self) -> None:
        assert resolve_writer("stdout") is sys.stdout
        assert resolve_writer({"stderr": None}) is sys.stderr
        assert resolve_writer(["stdout"]) is sys.stdout

    def test_several_destinations_tee(self, capsys) -> None:
        writer = resolve_writer({"stdout": None, "stderr": None})
        assert isinstance(writer, TeeWriter)
        writer.write("both\n")
        writer.flush()
        captured = capsys.readouterr()
        assert captured.out == "both\n"
        assert captured.err == "both\n"

    def test_file_destination(self, tmp_path) -> None:
        path = tmp_path / "logs" / "app.log"
        root = Registry({"root": {"format": "json", "writer": {"file": {"path": str(path)}}}}).root()
        assert isinstance(root.writer, FileWriter)
        root.info("persisted")
        root.writer.close()
        assert json_lines(path.read_text(encoding="utf-8"))[0]["msg"] == "persisted"

    def test_file_shorthand(self, tmp_path) -> None:
        writer = resolve_writer({"file": str(tmp_path / "app.log")})
        assert isinstance(writer, FileWriter)
        writer.close()

    def test_incomplete_entries_are_skipped(self) -> None:
        with capture_logs() as logs:
            assert resolve_writer({"host": "collector"}) is sys.stderr
            assert resolve_writer({"file": {}}) is sys.stderr
        assert len(logs) == 2

    def test_remote_destination_connects_lazily(self) -> None:
        writer = resolve_writer({"host": "127.0.0.1", "port": 9, "network": "udp"})
        assert isinstance(writer, SocketWriter)
        assert writer._sock is None

    def test_udp_remote_destination(self) -> None:
        receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        receiver.bind(("127.0.0.1", 0))
        receiver.settimeout(2)
        try:
            writer = SocketWriter("127.0.0.1", receiver.getsockname()[1], "udp")
            writer.write('{"msg": "over the wire"}\n')
            assert receiver.recv(1024) == b'{"msg": "over the wire"}\n'
            writer.close()
        finally:
            receiver.close()

    def test_non_numeric_port_is_skipped(self, tmp_path) -> None:
        with capture_logs() as logs:
            assert resolve_writer({"host": "collector", "port": "syslog"}) is sys.stderr
            writer = resolve_writer({"file": str(tmp_path / "app.log"), "host": "collector", "port": "syslog"})
        assert isinstance(writer, FileWriter)
        writer.close()
        assert [log["port"] for log in logs] == ["syslog", "syslog"]

    def test_unparseable_port_does_not_abort_root(self) -> None:
        with capture_logs():
            root = Registry({"root": {"writer": {"host": "collector", "port": "syslog"}}}).root()
        assert root.writer is sys.stderr


def _closed_port() -> int:
    free = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    free.bind(("127.0.0.1", 0))
    port = free.getsockname()[1]
    free.close()
    return port


class TestUnreachableCollector:
    def test_log_call_completes(self, capsys) -> None:
        port = _closed_port()
        root = Registry({"root": {"writer": {"host": "127.0.0.1", "port": port}}}).root()
        root.error("first")
        assert f"Failed to write to tcp://127.0.0.1:{port}" in capsys.readouterr().err

    def test_failed_socket_is_reset(self, capsys) -> None:
        writer = SocketWriter("127.0.0.1", _closed_port())
        writer.write("one\n")
        assert writer._sock is None
        writer.write("two\n")
        assert writer._sock is None
        assert capsys.readouterr().err.count("Failed to write to") == 2
