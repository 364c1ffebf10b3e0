"""
Unit tests for RouterOS CLI output parsing and rule normalization.
"""
import io

import pandas as pd
import pytest

from netwatch_manager import schemas
from netwatch_manager.services.netwatch.exceptions import NetwatchCommandError
from netwatch_manager.services.netwatch.transform import dataframe_to_watch_rules, parse_duration_seconds
from netwatch_manager.services.netwatch.vendors.routeros import (
    _validate_remote_id,
    build_rule_arguments,
    find_error_line,
    parse_print_field,
    parse_rule_line,
    parse_rule_output,
    quote_value,
    RouterOSNetwatch,
)

LIST_OUTPUT = """\
.id=*1;comment=core switch;disabled=false;down-script=;host=10.0.0.2;interval=00:00:05;since=may/01/2024 09:00:00;status=up;timeout=1s;up-script=
.id=*A;comment=printer;host=10.0.0.9;interval=1m;status=down;timeout=500ms
"""


class TestParseDuration:

    @pytest.mark.parametrize("value,expected", [
        ("1s", 1.0),
        ("500ms", 0.5),
        ("1m30s", 90.0),
        ("00:00:05", 5.0),
        ("1w2d03:04:05", 604800 + 2 * 86400 + 3 * 3600 + 4 * 60 + 5),
        ("250", 250.0),
        ("", None),
        ("soon", None),
        (None, None),
    ])
    def test_values(self, value, expected):
        assert parse_duration_seconds(value) == expected


class TestParseRuleOutput:

    def test_parse_rule_line(self):
        row = parse_rule_line(".id=*1;comment=a;b;host=10.0.0.1;status=up")

        assert row[".id"] == "*1"
        assert row["comment"] == "a;b"
        assert row["host"] == "10.0.0.1"

    def test_rows_are_normalized_to_watch_rules(self):
        rules = dataframe_to_watch_rules(parse_rule_output(LIST_OUTPUT))

        assert [r.remote_id for r in rules] == ["*1", "*A"]
        first, second = rules
        assert first.host == "10.0.0.2"
        assert first.comment == "core switch"
        assert first.timeout_ms == 1000
        assert first.interval_s == 5
        assert first.status == "up"
        assert first.up_script is None
        assert second.timeout_ms == 500
        assert second.interval_s == 60

    def test_empty_output(self):
        df = parse_rule_output("")

        assert df.empty
        assert dataframe_to_watch_rules(df) == []

    def test_rows_without_host_are_skipped(self):
        df = pd.DataFrame([{"id": "*1", "host": None, "status": "up"}, {"id": "*2", "host": "10.0.0.3"}])

        assert [r.host for r in dataframe_to_watch_rules(df)] == ["10.0.0.3"]

    def test_parse_print_field(self):
        output = "  name: edge-router\n"

        assert parse_print_field(output, "name") == "edge-router"
        assert parse_print_field(output, "version") is None


class TestBuildRuleArguments:

    def test_time_units_are_suffixed(self):
        spec = schemas.WatchRuleSpec(host="10.0.0.1", comment='Core "A"', timeout_ms=1500, interval_s=10)

        args = build_rule_arguments(spec)

        assert "host=10.0.0.1" in args
        assert 'comment="Core \\"A\\""' in args
        assert "timeout=1500ms" in args
        assert "interval=10s" in args
        assert "up-script" not in args

    def test_scripts_are_quoted(self):
        spec = schemas.WatchRuleSpec(
            host="10.0.0.1", comment="x", timeout_ms=1000, interval_s=5,
            up_script=':log info "$host up"',
        )

        assert 'up-script=":log info \\"\\$host up\\""' in build_rule_arguments(spec)

    def test_quote_value_escapes_newlines(self):
        assert quote_value("a\nb") == '"a\\nb"'

    def test_remote_id_validation(self):
        assert _validate_remote_id("*1F") == "*1F"
        with pytest.raises(NetwatchCommandError):
            _validate_remote_id("*1; /system reboot")

    def test_host_must_be_an_ip_address(self):
        spec = schemas.WatchRuleSpec(
            host='10.0.0.9 down-script="/system reboot"', comment="x", timeout_ms=1000, interval_s=5,
        )

        with pytest.raises(NetwatchCommandError):
            build_rule_arguments(spec)


class FakeSSHClient:
    """exec_command만 흉내 내는 paramiko.SSHClient 대체 객체"""

    def __init__(self, stdout="", stderr=""):
        self.stdout = stdout
        self.stderr = stderr
        self.commands = []

    def exec_command(self, command, timeout=None):
        self.commands.append(command)
        return None, io.BytesIO(self.stdout.encode()), io.BytesIO(self.stderr.encode())

    def close(self):
        pass


def connected_router(client):
    router = RouterOSNetwatch("192.0.2.1", "api", "secret")
    router._client = client
    router._connected = True
    return router


class TestCommandErrors:

    def test_error_words_in_comments_are_data(self):
        client = FakeSSHClient(
            ".id=*1;comment=Link failure: backup;host=10.0.0.1;status=up\n"
            ".id=*2;comment=no such item here;host=10.0.0.2;status=up\n"
        )

        rules = connected_router(client).list_rules()

        assert [r.host for r in rules] == ["10.0.0.1", "10.0.0.2"]
        assert rules[0].comment == "Link failure: backup"

    def test_rejected_command_raises(self):
        client = FakeSSHClient("failure: already have such entry\n")
        spec = schemas.WatchRuleSpec(host="10.0.0.1", comment="x", timeout_ms=1000, interval_s=5)

        with pytest.raises(NetwatchCommandError, match="already have such entry"):
            connected_router(client).create_rule(spec)

    def test_stderr_is_always_checked(self):
        assert find_error_line("", "bad command name foo (line 1 column 1)") is not None

    def test_print_output_is_not_an_error(self):
        assert find_error_line("  name: failure: lab router\n") is None
