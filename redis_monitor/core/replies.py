"""Typed view over raw redis-py replies.

The session disables redis-py's response callbacks, so commands hand back the
bare RESP values (``str``, ``int``, ``None``, ``list`` and, for errors nested in
arrays, ``ResponseError`` instances). ``Reply.from_raw`` turns those into an
immutable tree that the item handlers inspect.
"""

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from redis.exceptions import ResponseError

from redis_monitor.core.errors import ProtocolError


class ReplyType(str, Enum):
    """Shapes a Redis reply can take."""

    STATUS = "STATUS"
    INTEGER = "INTEGER"
    STRING = "STRING"
    ARRAY = "ARRAY"
    ERROR = "ERROR"
    NIL = "NIL"


# Expected-shape value that disables the shape check
ANY_REPLY: Optional[ReplyType] = None

# redis-py returns status and bulk strings as the same Python type
_TEXT_TYPES = {ReplyType.STATUS, ReplyType.STRING}


class Reply(BaseModel):
    """A single reply, possibly with nested elements for arrays."""

    model_config = ConfigDict(frozen=True)

    type: ReplyType
    value: Union[int, str, None] = None
    elements: List["Reply"] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> "Reply":
        """Build a reply from a raw redis-py response value.

        Args:
            raw: Value returned by ``execute_command`` with callbacks disabled

        Returns:
            Reply describing the value

        Raises:
            ProtocolError: If the value has a type RESP2 cannot produce
        """
        if raw is None:
            return cls(type=ReplyType.NIL)
        if isinstance(raw, ResponseError):
            return cls(type=ReplyType.ERROR, value=str(raw))
        if isinstance(raw, bool):
            return cls(type=ReplyType.INTEGER, value=int(raw))
        if isinstance(raw, int):
            return cls(type=ReplyType.INTEGER, value=raw)
        if isinstance(raw, bytes):
            return cls(type=ReplyType.STRING, value=raw.decode("utf-8", errors="replace"))
        if isinstance(raw, str):
            return cls(type=ReplyType.STRING, value=raw)
        if isinstance(raw, (list, tuple)):
            return cls(type=ReplyType.ARRAY, elements=[cls.from_raw(item) for item in raw])
        raise ProtocolError(f"Redis reply invalid - Error (Unsupported reply {type(raw).__name__})")

    @property
    def text(self) -> str:
        """Reply rendered as text; integers are formatted in base 10, nil is empty."""
        if self.value is None:
            return ""
        return str(self.value)

    @property
    def integer(self) -> int:
        if self.type == ReplyType.INTEGER:
            return int(self.value)
        raise ProtocolError(
            f"Redis reply invalid - Error (Expected {ReplyType.INTEGER.value}: "
            f"Received {self.type.value})"
        )


def check_reply_type(reply: Reply, expected: Optional[ReplyType], command: str) -> Reply:
    """Ensure a reply has the shape a command is expected to produce.

    Args:
        reply: Reply to check
        expected: Expected shape, or ``ANY_REPLY`` to accept any shape
        command: Command name used in the error message

    Returns:
        The reply, unchanged

    Raises:
        ProtocolError: If the reply is an error or has the wrong shape
    """
    if reply.type == ReplyType.ERROR:
        raise ProtocolError(f"Redis command error ({reply.text})")

    if expected is ANY_REPLY or reply.type == expected:
        return reply
    if reply.type in _TEXT_TYPES and expected in _TEXT_TYPES:
        return reply

    raise ProtocolError(
        f"Redis reply invalid - Error (Command {command} Expected {expected.value}: "
        f"Received {reply.type.value})"
    )


Reply.model_rebuild()
