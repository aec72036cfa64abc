"""Descriptor table for every supported item key.

The table is built once at import time and only read afterwards. Parameter
order and count are part of the item key contract and must not change.
"""

from typing import Dict, List

from redis_monitor.core.config import settings
from redis_monitor.core.convert import Datatype
from redis_monitor.core.validation import ParamSpec
from redis_monitor.items import handlers
from redis_monitor.items.models import ItemDescriptor, KeyGuard

VERSION_KEY = "redis.monitor.version"

SERVER = ParamSpec(arg="server", name="Redis server", default=settings.default_server)
PORT = ParamSpec(
    arg="port",
    name="Redis port",
    default=str(settings.default_port),
    minimum=settings.min_port,
    maximum=settings.max_port,
)
TIMEOUT = ParamSpec(
    arg="timeout",
    name="Redis timeout",
    default=str(settings.default_timeout),
    minimum=settings.min_timeout,
    maximum=settings.max_timeout,
)
PASSWORD = ParamSpec(
    arg="password",
    name="Redis password",
    default=settings.default_password.get_secret_value() or None,
    allow_empty=True,
    secret=True,
)
COMMAND = ParamSpec(arg="command", name="Redis command")
COMMAND_PARAMS = ParamSpec(arg="params", name="Redis params", allow_empty=True)
DATATYPE = ParamSpec(arg="datatype", name="Datatype")
SECTION = ParamSpec(arg="section", name="Section")
KEY = ParamSpec(arg="key", name="Key")
DEFAULT = ParamSpec(arg="default", name="Default", allow_empty=True)
DATABASE = ParamSpec(arg="database", name="Database")
SLAVE = ParamSpec(arg="slave", name="Slave")
CLIENT = ParamSpec(arg="client", name="Client")
FIELD = ParamSpec(arg="field", name="Field", allow_empty=True)
ELEMENT = ParamSpec(arg="element", name="Element", default="0", minimum=0)

CONNECTION = [SERVER, PORT, TIMEOUT, PASSWORD]
KEY_ITEM = CONNECTION + [DATABASE, KEY]

ANY_KEY = KeyGuard()
STRING_KEY = KeyGuard(key_type="string")
HASH_KEY = KeyGuard(key_type="hash")
HASH_FIELD = KeyGuard(key_type="hash", hash_field=True)
LIST_KEY = KeyGuard(key_type="list")


def _key_items() -> List[ItemDescriptor]:
    return [
        ItemDescriptor(
            key="redis.key.exists",
            params=KEY_ITEM,
            handler=handlers.key_present,
            output=Datatype.INTEGER,
            guard=ANY_KEY,
            exists=True,
            description="1 when the key exists, otherwise 0",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.ttl",
            params=KEY_ITEM,
            handler=handlers.key_ttl,
            output=Datatype.INTEGER,
            guard=ANY_KEY,
            description="Remaining time to live in seconds (-1 without expiry)",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.pttl",
            params=KEY_ITEM,
            handler=handlers.key_pttl,
            output=Datatype.INTEGER,
            guard=ANY_KEY,
            description="Remaining time to live in milliseconds (-1 without expiry)",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.type",
            params=KEY_ITEM,
            handler=handlers.key_type,
            output=Datatype.STRING,
            guard=ANY_KEY,
            description="Type of the key",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.string.exists",
            params=KEY_ITEM,
            handler=handlers.key_present,
            output=Datatype.INTEGER,
            guard=STRING_KEY,
            exists=True,
            description="1 when the key exists and holds a string, otherwise 0",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.string.get",
            params=KEY_ITEM + [DEFAULT],
            handler=handlers.string_get,
            output=Datatype.STRING,
            guard=STRING_KEY,
            default_on_missing=True,
            description="Value of a string key",
            test_params=",,,,0,key-a,",
        ),
        ItemDescriptor(
            key="redis.key.string.length",
            params=KEY_ITEM,
            handler=handlers.string_length,
            output=Datatype.INTEGER,
            guard=STRING_KEY,
            description="Length of a string key",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.hash.discovery",
            params=KEY_ITEM,
            handler=handlers.hash_discovery,
            output=Datatype.TEXT,
            guard=HASH_KEY,
            description="Discovers the fields of a hash key",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.hash.count",
            params=KEY_ITEM,
            handler=handlers.hash_count,
            output=Datatype.INTEGER,
            guard=HASH_KEY,
            description="Number of fields in a hash key",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.hash.exists",
            params=KEY_ITEM,
            handler=handlers.key_present,
            output=Datatype.INTEGER,
            guard=HASH_KEY,
            exists=True,
            description="1 when the key exists and holds a hash, otherwise 0",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.hash.field.exists",
            params=KEY_ITEM + [FIELD],
            handler=handlers.key_present,
            output=Datatype.INTEGER,
            guard=HASH_FIELD,
            exists=True,
            description="1 when the hash field exists, otherwise 0",
            test_params=",,,,0,key-a,field-a",
        ),
        ItemDescriptor(
            key="redis.key.hash.field.get",
            params=KEY_ITEM + [FIELD, DEFAULT],
            handler=handlers.hash_field_get,
            output=Datatype.STRING,
            guard=HASH_FIELD,
            default_on_missing=True,
            description="Value of a hash field",
            test_params=",,,,0,key-a,field-a,",
        ),
        ItemDescriptor(
            key="redis.key.hash.field.length",
            params=KEY_ITEM + [FIELD],
            handler=handlers.hash_field_length,
            output=Datatype.INTEGER,
            guard=HASH_FIELD,
            description="Length of a hash field value",
            test_params=",,,,0,key-a,field-a",
        ),
        ItemDescriptor(
            key="redis.key.list.exists",
            params=KEY_ITEM,
            handler=handlers.key_present,
            output=Datatype.INTEGER,
            guard=LIST_KEY,
            exists=True,
            description="1 when the key exists and holds a list, otherwise 0",
            test_params=",,,,0,key-a",
        ),
        ItemDescriptor(
            key="redis.key.list.get",
            params=KEY_ITEM + [ELEMENT, DEFAULT],
            handler=handlers.list_get,
            output=Datatype.STRING,
            guard=LIST_KEY,
            default_on_missing=True,
            description="Element of a list key by zero-based index",
            test_params=",,,,0,key-a,0,",
        ),
        ItemDescriptor(
            key="redis.key.list.length",
            params=KEY_ITEM,
            handler=handlers.list_length,
            output=Datatype.INTEGER,
            guard=LIST_KEY,
            description="Length of a list key",
            test_params=",,,,0,key-a",
        ),
    ]


def _server_items() -> List[ItemDescriptor]:
    return [
        ItemDescriptor(
            key=VERSION_KEY,
            params=[],
            handler=handlers.version,
            output=Datatype.STRING,
            connect=False,
            description="Version of the collector",
        ),
        ItemDescriptor(
            key="redis.session.status",
            params=CONNECTION,
            handler=handlers.session_status,
            output=Datatype.INTEGER,
            connect=False,
            description="1 when a session can be opened, otherwise 0",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.session.duration",
            params=CONNECTION,
            handler=handlers.session_duration,
            output=Datatype.FLOAT,
            connect=False,
            description="Milliseconds needed to open a session",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.command.supported",
            params=CONNECTION + [COMMAND],
            handler=handlers.command_supported,
            output=Datatype.INTEGER,
            description="1 when the server knows the command, otherwise 0",
            test_params=",,,,PING",
        ),
        ItemDescriptor(
            key="redis.command.duration",
            params=CONNECTION + [COMMAND, COMMAND_PARAMS],
            handler=handlers.command_duration,
            output=Datatype.FLOAT,
            description="Milliseconds taken by a command",
            test_params=",,,,PING,",
        ),
        ItemDescriptor(
            key="redis.info",
            params=CONNECTION + [DATATYPE, SECTION, KEY, DEFAULT],
            handler=handlers.info,
            description="Field from an INFO section",
            test_params=",,,,string,server,redis_version,",
        ),
        ItemDescriptor(
            key="redis.database.discovery",
            params=CONNECTION,
            handler=handlers.database_discovery,
            output=Datatype.TEXT,
            description="Discovers databases holding keys",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.database.info",
            params=CONNECTION + [DATATYPE, DATABASE, KEY, DEFAULT],
            handler=handlers.database_info,
            description="Field from a database keyspace line",
            test_params=",,,,integer,0,keys,0",
        ),
        ItemDescriptor(
            key="redis.slave.discovery",
            params=CONNECTION,
            handler=handlers.slave_discovery,
            output=Datatype.TEXT,
            description="Discovers connected slaves by ip:port",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.slave.info",
            params=CONNECTION + [DATATYPE, SLAVE, KEY, DEFAULT],
            handler=handlers.slave_info,
            description="Field from a slave replication line",
            test_params=",,,,string,127.0.0.1:6380,state,",
        ),
        ItemDescriptor(
            key="redis.ping",
            params=CONNECTION,
            handler=handlers.ping,
            output=Datatype.STRING,
            description="Reply to PING",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.time",
            params=CONNECTION,
            handler=handlers.server_time,
            output=Datatype.STRING,
            description="Server UNIX time in seconds",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.lastsave",
            params=CONNECTION,
            handler=handlers.lastsave,
            output=Datatype.INTEGER,
            description="UNIX time of the last successful save",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.role",
            params=CONNECTION,
            handler=handlers.role,
            output=Datatype.STRING,
            description="Replication role of the server",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.keyspace.hit.ratio",
            params=CONNECTION,
            handler=handlers.keyspace_hit_ratio,
            output=Datatype.FLOAT,
            description="Keyspace hits divided by hits plus misses",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.slowlog.length",
            params=CONNECTION,
            handler=handlers.slowlog_length,
            output=Datatype.INTEGER,
            description="Number of entries in the slow log",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.config",
            params=CONNECTION + [DATATYPE, KEY, DEFAULT],
            handler=handlers.config,
            description="Configuration parameter value",
            test_params=",,,,string,maxmemory-policy,",
        ),
        ItemDescriptor(
            key="redis.client.discovery",
            params=CONNECTION,
            handler=handlers.client_discovery,
            output=Datatype.TEXT,
            description="Discovers client connections by address",
            test_params=",,,",
        ),
        ItemDescriptor(
            key="redis.client.info",
            params=CONNECTION + [DATATYPE, CLIENT, KEY, DEFAULT],
            handler=handlers.client_info,
            description="Field from a CLIENT LIST entry",
            test_params=",,,,string,127.0.0.1:50000,name,",
        ),
    ]


def build_registry() -> Dict[str, ItemDescriptor]:
    descriptors = _server_items() + _key_items()
    return {descriptor.key: descriptor for descriptor in descriptors}


REGISTRY: Dict[str, ItemDescriptor] = build_registry()


def get_descriptor(key: str):
    return REGISTRY.get(key)


def list_descriptors() -> List[ItemDescriptor]:
    return list(REGISTRY.values())
