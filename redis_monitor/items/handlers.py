"""Item handlers.

Each handler receives an ``ItemContext`` whose session is already connected
(and, for key items, already past the database and key guards) and returns
the item value. Absence is signalled with ``NotFoundError``; the orchestrator
decides whether a default or a zero absorbs it.
"""

import logging
import time

from redis_monitor import __version__
from redis_monitor.core.convert import Datatype, convert_value
from redis_monitor.core.errors import ItemError, NotFoundError, ProtocolError
from redis_monitor.core.replies import Reply, ReplyType
from redis_monitor.core.report import INFORMATION_MISSING, Report, ReportKind, resolve_value
from redis_monitor.items.discovery import discovery_document, macro, single_macro_document
from redis_monitor.items.models import ItemContext, ItemValue

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return max(0.0, round((time.perf_counter() - start) * 1000.0, 3))


def _first_element(reply: Reply, command: str) -> Reply:
    if not reply.elements:
        raise ProtocolError(
            f"Redis reply invalid - Error (Command {command} Expected ARRAY: Received empty ARRAY)"
        )
    return reply.elements[0]


def _report(ctx: ItemContext, *command: str) -> Report:
    return Report(ctx.session.command(*command, expected=ReplyType.STRING).text)


def _integer(ctx: ItemContext, *command: str) -> int:
    return ctx.session.command(*command, expected=ReplyType.INTEGER).integer


def _converted(ctx: ItemContext, value: str) -> ItemValue:
    return convert_value(value, ctx.args["datatype"])


# ---------------------------- session ---------------------------- #


def version(ctx: ItemContext) -> str:
    return f"redis-monitor {__version__}"


def session_status(ctx: ItemContext) -> int:
    """1 when a session can be opened, 0 otherwise."""
    try:
        with ctx.open_session():
            return 1
    except ItemError as e:
        logger.debug(f"Session status check failed: {e}")
        return 0


def session_duration(ctx: ItemContext) -> float:
    """Milliseconds needed to connect, authenticate and name the session."""
    start = time.perf_counter()
    with ctx.open_session():
        return _elapsed_ms(start)


# ---------------------------- commands ---------------------------- #


def command_supported(ctx: ItemContext) -> int:
    reply = ctx.session.command("COMMAND", "INFO", ctx.args["command"], expected=ReplyType.ARRAY)
    if not reply.elements:
        return 0
    first = reply.elements[0]
    return 1 if first.type == ReplyType.ARRAY and first.elements else 0


def command_duration(ctx: ItemContext) -> float:
    """Milliseconds taken by an arbitrary command; its reply shape is not checked."""
    args = ctx.args["command"].split() + ctx.args["params"].split()
    start = time.perf_counter()
    ctx.session.command(*args)
    return _elapsed_ms(start)


def ping(ctx: ItemContext) -> str:
    return ctx.session.command("PING", expected=ReplyType.STATUS).text


def server_time(ctx: ItemContext) -> str:
    reply = ctx.session.command("TIME", expected=ReplyType.ARRAY)
    return _first_element(reply, "TIME").text


def lastsave(ctx: ItemContext) -> int:
    return _integer(ctx, "LASTSAVE")


def role(ctx: ItemContext) -> str:
    reply = ctx.session.command("ROLE", expected=ReplyType.ARRAY)
    return _first_element(reply, "ROLE").text


def keyspace_hit_ratio(ctx: ItemContext) -> float:
    """keyspace_hits / (keyspace_hits + keyspace_misses); 1.0 while there are no hits."""
    report = _report(ctx, "INFO", "stats")
    hits = convert_value(
        resolve_value(report.lookup("keyspace_hits"), None, INFORMATION_MISSING), Datatype.INTEGER
    )
    misses = convert_value(
        resolve_value(report.lookup("keyspace_misses"), None, INFORMATION_MISSING),
        Datatype.INTEGER,
    )
    if hits == 0:
        return 1.0
    return hits / (hits + misses)


def slowlog_length(ctx: ItemContext) -> int:
    return _integer(ctx, "SLOWLOG", "LEN")


def config(ctx: ItemContext) -> ItemValue:
    """CONFIG GET replies with a flat name/value array; the value is element 1."""
    reply = ctx.session.command("CONFIG", "GET", ctx.args["key"], expected=ReplyType.ARRAY)
    value = reply.elements[1].text if len(reply.elements) > 1 else None
    return _converted(ctx, resolve_value(value, ctx.default, INFORMATION_MISSING))


# ---------------------------- reports ---------------------------- #


def info(ctx: ItemContext) -> ItemValue:
    report = _report(ctx, "INFO", ctx.args["section"])
    value = resolve_value(report.lookup(ctx.args["key"]), ctx.default, INFORMATION_MISSING)
    return _converted(ctx, value)


def database_discovery(ctx: ItemContext) -> str:
    report = _report(ctx, "INFO", "keyspace")
    return single_macro_document("database", report.identities(ReportKind.DATABASE))


def database_info(ctx: ItemContext) -> ItemValue:
    report = _report(ctx, "INFO", "keyspace")
    value = report.select_field(
        ReportKind.DATABASE, ctx.args["database"], ctx.args["key"], ctx.default
    )
    return _converted(ctx, value)


def slave_discovery(ctx: ItemContext) -> str:
    report = _report(ctx, "INFO", "replication")
    return single_macro_document("slave", report.identities(ReportKind.SLAVE))


def slave_info(ctx: ItemContext) -> ItemValue:
    report = _report(ctx, "INFO", "replication")
    value = report.select_field(ReportKind.SLAVE, ctx.args["slave"], ctx.args["key"], ctx.default)
    return _converted(ctx, value)


def client_discovery(ctx: ItemContext) -> str:
    report = _report(ctx, "CLIENT", "LIST")
    clients = report.identities(ReportKind.CLIENT, exclude_name=ctx.session.client_name)
    return single_macro_document("client", clients)


def client_info(ctx: ItemContext) -> ItemValue:
    report = _report(ctx, "CLIENT", "LIST")
    value = report.select_field(ReportKind.CLIENT, ctx.args["client"], ctx.args["key"], ctx.default)
    return _converted(ctx, value)


# ---------------------------- keys ---------------------------- #


def key_present(ctx: ItemContext) -> int:
    # Only reached once every guard has passed
    return 1


def key_ttl(ctx: ItemContext) -> int:
    return _integer(ctx, "TTL", ctx.args["key"])


def key_pttl(ctx: ItemContext) -> int:
    return _integer(ctx, "PTTL", ctx.args["key"])


def key_type(ctx: ItemContext) -> str:
    return ctx.session.command("TYPE", ctx.args["key"], expected=ReplyType.STATUS).text


def string_get(ctx: ItemContext) -> str:
    return ctx.session.command("GET", ctx.args["key"], expected=ReplyType.STRING).text


def string_length(ctx: ItemContext) -> int:
    return _integer(ctx, "STRLEN", ctx.args["key"])


def hash_discovery(ctx: ItemContext) -> str:
    reply = ctx.session.command("HKEYS", ctx.args["key"], expected=ReplyType.ARRAY)
    rows = [
        {
            macro("database"): ctx.args["database"],
            macro("key"): ctx.args["key"],
            macro("field"): field.text,
        }
        for field in reply.elements
    ]
    return discovery_document(rows)


def hash_count(ctx: ItemContext) -> int:
    return _integer(ctx, "HLEN", ctx.args["key"])


def hash_field_get(ctx: ItemContext) -> str:
    reply = ctx.session.command(
        "HGET", ctx.args["key"], ctx.args["field"], expected=ReplyType.STRING
    )
    return reply.text


def hash_field_length(ctx: ItemContext) -> int:
    return _integer(ctx, "HSTRLEN", ctx.args["key"], ctx.args["field"])


def list_get(ctx: ItemContext) -> str:
    """Element at a zero-based index; a blank element means the head of the list."""
    index = int(ctx.args["element"])

    length = _integer(ctx, "LLEN", ctx.args["key"])
    if index >= length:
        raise NotFoundError("Redis list element does not exist")

    reply = ctx.session.command("LINDEX", ctx.args["key"], str(index), expected=ReplyType.STRING)
    return reply.text


def list_length(ctx: ItemContext) -> int:
    return _integer(ctx, "LLEN", ctx.args["key"])
