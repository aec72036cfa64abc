"""Error types raised while collecting an item.

Every error carries the human-readable message that is reported back to the
monitoring agent when an item fails.
"""


class ItemError(Exception):
    """Base class for failures that end an item with a FAIL result."""

    pass


class ParameterError(ItemError):
    """Raised when an item parameter is missing, blank or out of range."""

    pass


class ConnectionFailedError(ItemError):
    """Raised when the Redis server cannot be reached or the link drops."""

    pass


class ProtocolError(ItemError):
    """Raised on an error reply, an unexpected reply shape or an unparsable value."""

    pass


class NotFoundError(ItemError):
    """Raised when the requested section, key, field or element does not exist."""

    pass
