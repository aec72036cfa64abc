"""Tests for the generic item runner."""

from redis.exceptions import ConnectionError

from redis_monitor.core.convert import Datatype
from redis_monitor.items import ItemStatus, run_item
from redis_monitor.items.models import ItemDescriptor
from redis_monitor.items.registry import CONNECTION, VERSION_KEY

CONN = ["", "", "", ""]

SERVER_INFO = "# Server\r\nredis_version:7.0.0\r\nredis_mode:standalone\r\nconfig_file:\r\n"


class TestValidation:
    """Parameter problems fail before any connection is attempted."""

    def test_unsupported_key(self, fake_server):
        result = run_item("redis.nothing", CONN)

        assert result.status == ItemStatus.FAIL
        assert result.message == "Unsupported item key"
        assert fake_server.clients == []

    def test_unsupported_key_masks_password(self, fake_server):
        result = run_item("redis.nothing", ["", "", "", "s3cret"])

        assert result.message == "Unsupported item key"
        assert result.key == "redis.nothing[,,,***]"

    def test_wrong_parameter_count(self, fake_server):
        result = run_item("redis.ping", ["", "", ""])

        assert not result.ok
        assert result.message == "Invalid parameter count specified, expected 4 received 3"
        assert fake_server.clients == []

    def test_port_below_minimum(self, fake_server):
        result = run_item("redis.ping", ["", "0", "", ""])

        assert result.message == "Redis port must be an integer greater than or equal to 1"
        assert fake_server.clients == []

    def test_timeout_above_maximum(self, fake_server):
        result = run_item("redis.ping", ["", "", "31", ""])

        assert result.message == "Redis timeout must be an integer less than or equal to 30"

    def test_invalid_datatype(self, fake_server):
        result = run_item("redis.info", CONN + ["json", "server", "redis_version", ""])

        assert result.message == "Datatype must be an integer,float,string,text"
        assert fake_server.clients == []

    def test_blank_key(self, fake_server):
        result = run_item("redis.key.ttl", CONN + ["0", ""])

        assert result.message == "Key must not be empty"

    def test_blank_connection_params_use_defaults(self, fake_server):
        fake_server.reply("PING", value="PONG")
        run_item("redis.ping", CONN)

        kwargs = fake_server.clients[0].kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 6379
        assert kwargs["socket_timeout"] == 5


class TestInfoScenario:
    """INFO field lookup with and without defaults."""

    def test_field_found(self, fake_server):
        fake_server.reply("INFO", "server", value=SERVER_INFO)
        result = run_item("redis.info", CONN + ["string", "server", "redis_version", ""])

        assert result.ok
        assert result.value == "7.0.0"
        assert result.value_type == Datatype.STRING

    def test_missing_field_with_default(self, fake_server):
        fake_server.reply("INFO", "server", value=SERVER_INFO)
        result = run_item("redis.info", CONN + ["string", "server", "nonexistent_field", "N/A"])

        assert result.ok
        assert result.value == "N/A"

    def test_missing_field_without_default(self, fake_server):
        fake_server.reply("INFO", "server", value=SERVER_INFO)
        result = run_item("redis.info", CONN + ["string", "server", "nonexistent_field", ""])

        assert not result.ok
        assert result.message == "Redis information does not exist"

    def test_empty_field_is_found_without_default(self, fake_server):
        fake_server.reply("INFO", "server", value=SERVER_INFO)
        result = run_item("redis.info", CONN + ["string", "server", "config_file", ""])

        assert result.ok
        assert result.value == ""

    def test_empty_field_ignores_default(self, fake_server):
        fake_server.reply("INFO", "server", value=SERVER_INFO)
        result = run_item("redis.info", CONN + ["string", "server", "config_file", "N/A"])

        assert result.ok
        assert result.value == ""

    def test_integer_datatype(self, fake_server):
        fake_server.reply("INFO", "clients", value="# Clients\r\nconnected_clients:12\r\n")
        result = run_item("redis.info", CONN + ["integer", "clients", "connected_clients", ""])

        assert result.value == 12
        assert result.value_type == Datatype.INTEGER

    def test_unconvertible_value(self, fake_server):
        fake_server.reply("INFO", "server", value=SERVER_INFO)
        result = run_item("redis.info", CONN + ["integer", "server", "redis_mode", ""])

        assert not result.ok
        assert result.message == "Redis value (standalone) is not a valid integer"


class TestSessionHandling:
    def test_connection_failure_fails_item(self, fake_server):
        fake_server.connect_error = ConnectionError("Connection refused")
        result = run_item("redis.ping", CONN)

        assert not result.ok
        assert result.message == "Redis connection failed (Connection refused)"

    def test_session_closed_after_success(self, fake_server):
        fake_server.reply("PING", value="PONG")
        run_item("redis.ping", CONN)

        assert fake_server.clients[0].closed

    def test_session_closed_after_failure(self, fake_server):
        fake_server.reply("EXISTS", value=0)
        result = run_item("redis.key.ttl", CONN + ["0", "key-a"])

        assert not result.ok
        assert fake_server.clients[0].closed

    def test_password_is_masked_in_result_key(self, fake_server):
        fake_server.reply("AUTH", value="OK")
        fake_server.reply("PING", value="PONG")
        result = run_item("redis.ping", ["", "", "", "s3cret"])

        assert result.ok
        assert "s3cret" not in result.key
        assert result.key == "redis.ping[,,,***]"
        assert ("AUTH", "s3cret") in fake_server.calls


class TestCustomRegistry:
    def test_handler_without_connection(self, fake_server):
        descriptor = ItemDescriptor(
            key="custom.answer",
            params=[],
            handler=lambda ctx: 42,
            output=Datatype.INTEGER,
            connect=False,
        )
        result = run_item("custom.answer", [], registry={"custom.answer": descriptor})

        assert result.ok
        assert result.value == 42
        assert fake_server.clients == []

    def test_handler_receives_validated_args(self, fake_server):
        seen = {}

        def handler(ctx):
            seen.update(ctx.args)
            return "ok"

        descriptor = ItemDescriptor(
            key="custom.args", params=CONNECTION, handler=handler, output=Datatype.STRING
        )
        run_item("custom.args", CONN, registry={"custom.args": descriptor})

        assert seen == {"server": "127.0.0.1", "port": "6379", "timeout": "5", "password": ""}


def test_version_item(fake_server):
    result = run_item(VERSION_KEY, [])

    assert result.ok
    assert result.value.startswith("redis-monitor ")
    assert fake_server.clients == []
