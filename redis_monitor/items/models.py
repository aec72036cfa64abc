"""Models shared by the item registry, handlers and orchestrator."""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from redis_monitor.core.convert import Datatype
from redis_monitor.core.session import ConnectionParams, RedisSession
from redis_monitor.core.validation import ParamSpec

ItemValue = Union[int, float, str]


class ItemStatus(str, Enum):
    OK = "ok"
    FAIL = "fail"


class KeyGuard(BaseModel):
    """Checks run against a key before an item's own command."""

    model_config = ConfigDict(frozen=True)

    key_type: Optional[str] = Field(default=None, description="Required TYPE of the key")
    hash_field: bool = Field(default=False, description="Require the hash field to exist")


class ItemDescriptor(BaseModel):
    """Static definition of one item key."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    params: List[ParamSpec]
    handler: Callable[["ItemContext"], ItemValue]
    description: str = ""
    output: Optional[Datatype] = Field(
        default=None, description="Reported type; None means the Datatype parameter decides"
    )
    guard: Optional[KeyGuard] = Field(
        default=None, description="Select the database and require the key before running"
    )
    exists: bool = Field(default=False, description="Report 0 instead of failing when a guard misses")
    default_on_missing: bool = Field(
        default=False, description="Report the Default parameter when the key or element is missing"
    )
    connect: bool = Field(default=True, description="Open a session before calling the handler")
    test_params: str = Field(default="", description="Parameters used by the self test")

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def signature(self) -> str:
        if not self.params:
            return self.key
        return f"{self.key}[{','.join(spec.arg for spec in self.params)}]"

    @property
    def secret_positions(self) -> List[int]:
        return [index for index, spec in enumerate(self.params) if spec.secret]


class ItemContext:
    """Validated arguments and the open session for one invocation."""

    def __init__(
        self,
        descriptor: ItemDescriptor,
        args: Dict[str, str],
        session: Optional[RedisSession] = None,
    ):
        self.descriptor = descriptor
        self.args = args
        self.session = session

    def connection_params(self) -> ConnectionParams:
        password = self.args.get("password", "")
        return ConnectionParams(
            host=self.args["server"],
            port=int(self.args["port"]),
            timeout=int(self.args["timeout"]),
            password=SecretStr(password) if password else None,
        )

    def open_session(self) -> RedisSession:
        return RedisSession(self.connection_params())

    @property
    def default(self) -> Optional[str]:
        return self.args.get("default") or None


class ItemResult(BaseModel):
    """Outcome of one item invocation."""

    key: str = Field(..., description="Item key with secrets masked")
    status: ItemStatus
    value: Optional[ItemValue] = None
    value_type: Optional[Datatype] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ItemStatus.OK

    @classmethod
    def success(cls, key: str, value: ItemValue, value_type: Datatype) -> "ItemResult":
        return cls(key=key, status=ItemStatus.OK, value=value, value_type=value_type)

    @classmethod
    def failure(cls, key: str, message: str) -> "ItemResult":
        return cls(key=key, status=ItemStatus.FAIL, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


ItemDescriptor.model_rebuild()
