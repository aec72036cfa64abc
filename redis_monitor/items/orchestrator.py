"""Generic item execution.

``run_item`` drives every item through the same steps:

1. validate the parameters against the item's descriptor
2. open a session (unless the handler manages its own)
3. select the database and check the key, for key items
4. run the handler and convert its value
5. close the session and return an ``ItemResult``

Every ``ItemError`` ends the item with a FAIL result carrying its message.
"""

import logging
from typing import Dict, Optional, Sequence

from redis_monitor.core.convert import Datatype
from redis_monitor.core.errors import ItemError, NotFoundError
from redis_monitor.core.keys import format_item_key
from redis_monitor.core.replies import ReplyType
from redis_monitor.core.validation import validate_params
from redis_monitor.items.models import ItemContext, ItemDescriptor, ItemResult, ItemValue
from redis_monitor.items.registry import CONNECTION, PASSWORD, REGISTRY

logger = logging.getLogger(__name__)

UNSUPPORTED = "Unsupported item key"

# Unknown keys carry no descriptor; mask where the connection password would sit
FALLBACK_SECRET_POSITIONS = [CONNECTION.index(PASSWORD)]


def check_key(ctx: ItemContext) -> None:
    """Run the database and key guards of a key item.

    Raises:
        NotFoundError: If the database, key, key type or hash field is missing
    """
    guard = ctx.descriptor.guard
    session = ctx.session
    key = ctx.args["key"]

    session.select_database(ctx.args["database"])

    if session.command("EXISTS", key, expected=ReplyType.INTEGER).integer != 1:
        raise NotFoundError("Redis key does not exist")

    if guard.key_type is not None:
        key_type = session.command("TYPE", key, expected=ReplyType.STATUS).text
        if key_type != guard.key_type:
            raise NotFoundError("Redis key type does not match")

    if guard.hash_field:
        reply = session.command("HEXISTS", key, ctx.args["field"], expected=ReplyType.INTEGER)
        if reply.integer != 1:
            raise NotFoundError("Redis hash field does not exist")


def _run_handler(ctx: ItemContext) -> ItemValue:
    descriptor = ctx.descriptor
    if descriptor.guard is None:
        return descriptor.handler(ctx)

    try:
        check_key(ctx)
        return descriptor.handler(ctx)
    except NotFoundError as e:
        if descriptor.exists:
            logger.debug(f"{e} - reporting 0")
            return 0
        if descriptor.default_on_missing and ctx.default is not None:
            logger.debug(f"{e} - reporting default")
            return ctx.default
        raise


def _value_type(descriptor: ItemDescriptor, args: Dict[str, str]) -> Datatype:
    if descriptor.output is not None:
        return descriptor.output
    return Datatype(args["datatype"])


def run_item(
    key: str,
    params: Sequence[str],
    registry: Optional[Dict[str, ItemDescriptor]] = None,
) -> ItemResult:
    """Collect one item.

    Args:
        key: Item key name, e.g. ``redis.info``
        params: Positional parameters as sent by the agent
        registry: Descriptor table to use instead of the built-in one

    Returns:
        ItemResult with either a value or a failure message
    """
    descriptor = (registry if registry is not None else REGISTRY).get(key)
    if descriptor is None:
        item_key = format_item_key(key, params, masked=FALLBACK_SECRET_POSITIONS)
        logger.debug(f"{UNSUPPORTED} - Key {item_key}")
        return ItemResult.failure(item_key, UNSUPPORTED)

    item_key = format_item_key(key, params, masked=descriptor.secret_positions)
    logger.debug(f"Enter item {item_key}")

    try:
        values = validate_params(descriptor.params, params)
        args = {spec.arg: value for spec, value in zip(descriptor.params, values)}

        if descriptor.connect:
            ctx = ItemContext(descriptor, args)
            with ctx.open_session() as session:
                ctx.session = session
                value = _run_handler(ctx)
        else:
            value = descriptor.handler(ItemContext(descriptor, args))
    except ItemError as e:
        logger.debug(f"{e} - Key {item_key}")
        return ItemResult.failure(item_key, str(e))
    finally:
        logger.debug(f"Exit item {item_key}")

    logger.debug(f"Key ({item_key}) returned value ({value})")
    return ItemResult.success(item_key, value, _value_type(descriptor, args))
