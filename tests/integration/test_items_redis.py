"""Integration tests against a real Redis server.

Run with ``pytest --run-integration-tests``; a Redis container is started with
testcontainers.
"""

import json

import pytest
from redis import Redis
from testcontainers.redis import RedisContainer

from redis_monitor.items import run_item

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def redis_server():
    with RedisContainer("redis:7-alpine") as container:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(6379)
        client = Redis(host=host, port=int(port), decode_responses=True)
        client.select(1)
        client.set("string-a", "hello")
        client.hset("hash-a", mapping={"f1": "v1", "f2": "value-2"})
        client.rpush("list-a", "a", "b", "c")
        client.close()
        yield host, str(port)


@pytest.fixture
def conn(redis_server):
    host, port = redis_server
    return [host, port, "5", ""]


def test_session_status(conn):
    assert run_item("redis.session.status", conn).value == 1


def test_unreachable_server_status(redis_server):
    host, _ = redis_server
    assert run_item("redis.session.status", [host, "1", "1", ""]).value == 0


def test_info_version(conn):
    result = run_item("redis.info", conn + ["string", "server", "redis_version", ""])

    assert result.ok
    assert result.value.startswith("7.")


def test_database_discovery(conn):
    result = run_item("redis.database.discovery", conn)

    assert {"{#DATABASE}": "1"} in json.loads(result.value)["data"]


def test_database_info(conn):
    assert run_item("redis.database.info", conn + ["integer", "db1", "keys", ""]).value == 3


def test_client_discovery_excludes_itself(conn):
    result = run_item("redis.client.discovery", conn)

    assert result.ok
    assert isinstance(json.loads(result.value)["data"], list)


def test_ping_and_role(conn):
    assert run_item("redis.ping", conn).value == "PONG"
    assert run_item("redis.role", conn).value == "master"


def test_config(conn):
    result = run_item("redis.config", conn + ["integer", "databases", ""])

    assert result.value == 16


def test_key_items(conn):
    assert run_item("redis.key.exists", conn + ["1", "string-a"]).value == 1
    assert run_item("redis.key.exists", conn + ["1", "missing"]).value == 0
    assert run_item("redis.key.type", conn + ["1", "hash-a"]).value == "hash"
    assert run_item("redis.key.ttl", conn + ["1", "string-a"]).value == -1
    assert run_item("redis.key.string.get", conn + ["1", "string-a", ""]).value == "hello"
    assert run_item("redis.key.string.length", conn + ["1", "string-a"]).value == 5


def test_hash_items(conn):
    assert run_item("redis.key.hash.count", conn + ["1", "hash-a"]).value == 2
    assert run_item("redis.key.hash.field.get", conn + ["1", "hash-a", "f1", ""]).value == "v1"
    assert run_item("redis.key.hash.field.length", conn + ["1", "hash-a", "f2"]).value == 7
    fields = json.loads(run_item("redis.key.hash.discovery", conn + ["1", "hash-a"]).value)
    assert sorted(row["{#FIELD}"] for row in fields["data"]) == ["f1", "f2"]


def test_list_items(conn):
    assert run_item("redis.key.list.length", conn + ["1", "list-a"]).value == 3
    assert run_item("redis.key.list.get", conn + ["1", "list-a", "2", ""]).value == "c"
    result = run_item("redis.key.list.get", conn + ["1", "list-a", "3", ""])
    assert result.message == "Redis list element does not exist"
