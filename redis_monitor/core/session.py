"""Short-lived Redis sessions used by a single item invocation.

Each invocation opens its own connection, authenticates, names itself with
CLIENT SETNAME so discovery can leave it out, runs its commands and closes the
connection again. Nothing is pooled or shared between invocations.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field, SecretStr
from redis import Redis
from redis.backoff import NoBackoff
from redis.exceptions import (
    AuthenticationError,
    ConnectionError,
    ResponseError,
    TimeoutError,
)
from redis.retry import Retry

from redis_monitor.core.config import settings
from redis_monitor.core.errors import (
    ConnectionFailedError,
    ItemError,
    NotFoundError,
    ProtocolError,
)
from redis_monitor.core.replies import ANY_REPLY, Reply, ReplyType, check_reply_type
from redis_monitor.core.report import normalize_database

logger = logging.getLogger(__name__)

AUTH_FAILED = "Redis authentication failed"

# Commands reported together with their subcommand, e.g. "CONFIG GET"
_COMPOUND_COMMANDS = {"CLIENT", "COMMAND", "CONFIG", "INFO", "SLOWLOG"}


def command_name(args) -> str:
    if len(args) > 1 and args[0].upper() in _COMPOUND_COMMANDS:
        return f"{args[0]} {args[1]}"
    return args[0]


class ConnectionParams(BaseModel):
    """Where and how to connect for one invocation."""

    host: str = Field(..., description="Redis server address")
    port: int = Field(..., description="Redis server port")
    timeout: int = Field(..., description="Connect and command timeout in seconds")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class RedisSession:
    """A single authenticated connection, used as a context manager.

    Example:
        with RedisSession(params) as session:
            reply = session.command("PING", expected=ReplyType.STATUS)
    """

    def __init__(self, params: ConnectionParams, client_name: Optional[str] = None):
        self.params = params
        self.client_name = client_name or settings.client_name
        self.client: Optional[Redis] = None

    def __enter__(self) -> "RedisSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def connect(self) -> None:
        """Open the connection, authenticate and name it.

        Raises:
            ConnectionFailedError: If the server is unreachable or rejects the credentials
        """
        logger.debug(f"Connecting to Redis at {self.params.address}")
        try:
            # single_connection_client connects in the constructor
            self.client = Redis(
                host=self.params.host,
                port=self.params.port,
                socket_timeout=self.params.timeout,
                socket_connect_timeout=self.params.timeout,
                decode_responses=True,
                encoding_errors="replace",
                single_connection_client=True,
                retry=Retry(NoBackoff(), 0),
                lib_name=None,
                lib_version=None,
            )
            # Raw replies only; the Reply model does the interpretation
            self.client.response_callbacks.clear()
        except (ConnectionError, TimeoutError) as e:
            self.close()
            raise ConnectionFailedError(f"Redis connection failed ({e})") from e

        try:
            self._authenticate()
            self._probe()
            self._set_name()
        except ItemError:
            self.close()
            raise
        except (ConnectionError, TimeoutError) as e:
            self.close()
            raise ConnectionFailedError(f"Redis connection failed ({e})") from e

    def _authenticate(self) -> None:
        password = self.params.password.get_secret_value() if self.params.password else ""
        try:
            self.client.execute_command("AUTH", password)
        except (AuthenticationError, ResponseError) as e:
            # The ECHO probe decides whether the session is usable
            logger.debug(f"AUTH not accepted by {self.params.address}: {e}")

    def _probe(self) -> None:
        try:
            self.client.execute_command("ECHO", self.client_name)
        except AuthenticationError as e:
            raise ConnectionFailedError(AUTH_FAILED) from e
        except ResponseError as e:
            if str(e).startswith("NOAUTH"):
                raise ConnectionFailedError(AUTH_FAILED) from e
            raise ProtocolError(f"Redis command error ({e})") from e

    def _set_name(self) -> None:
        try:
            self.client.execute_command("CLIENT", "SETNAME", self.client_name)
        except ResponseError as e:
            logger.debug(f"CLIENT SETNAME rejected by {self.params.address}: {e}")

    def close(self) -> None:
        """Close the connection; safe to call more than once."""
        if self.client is None:
            return
        client, self.client = self.client, None
        try:
            client.close()
        except (ConnectionError, TimeoutError) as e:
            logger.debug(f"Error closing connection to {self.params.address}: {e}")

    def command(self, *args: str, expected: Optional[ReplyType] = ANY_REPLY) -> Reply:
        """Run a command and check the shape of its reply.

        Args:
            *args: Command name and arguments, one element per RESP argument
            expected: Expected reply shape, ``ANY_REPLY`` to accept anything

        Returns:
            The reply

        Raises:
            ConnectionFailedError: If the connection is lost
            ProtocolError: On an error reply or an unexpected reply shape
        """
        if self.client is None:
            raise ConnectionFailedError("Redis connection lost (session is closed)")

        name = command_name(args)
        logger.debug(f"Running Redis command {name} on {self.params.address}")
        try:
            raw = self.client.execute_command(*args)
        except AuthenticationError as e:
            raise ConnectionFailedError(AUTH_FAILED) from e
        except ResponseError as e:
            raise ProtocolError(f"Redis command error ({e})") from e
        except (ConnectionError, TimeoutError) as e:
            raise ConnectionFailedError(f"Redis connection lost ({e})") from e

        return check_reply_type(Reply.from_raw(raw), expected, name)

    def select_database(self, database: str) -> None:
        """Select a logical database.

        Raises:
            NotFoundError: If the server refuses the database
        """
        try:
            reply = self.command("SELECT", normalize_database(database), expected=ReplyType.STATUS)
        except ProtocolError as e:
            raise NotFoundError("Redis database does not exist") from e
        if reply.text != "OK":
            raise NotFoundError("Redis database does not exist")
