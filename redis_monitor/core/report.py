"""Field extraction from whole Redis text reports.

A ``Report`` wraps the text of an INFO section or a CLIENT LIST reply and
answers three kinds of question:

- plain lookup of a field (``redis.info``, ``redis.config`` style)
- lookup of a field inside the line selected by an identity (a database id,
  a slave ``ip:port`` or a client ``addr``)
- the ordered identities of every such line, for discovery
"""

import logging
from enum import Enum
from typing import List, Optional

from redis_monitor.core.errors import NotFoundError
from redis_monitor.core.parsing import (
    DATABASE_LINE,
    INFO_LINE,
    SLAVE_LINE,
    ReportLine,
    parse_line,
    resolve_field,
    split_lines,
)

logger = logging.getLogger(__name__)


class ReportKind(str, Enum):
    """Families of selectable report lines."""

    DATABASE = "database"
    SLAVE = "slave"
    CLIENT = "client"


# Messages used when the selected line or the field inside it is missing
NOT_FOUND_MESSAGES = {
    ReportKind.DATABASE: ("Redis database does not exist", "Redis database information does not exist"),
    ReportKind.SLAVE: ("Redis slave does not exist", "Redis slave information does not exist"),
    ReportKind.CLIENT: ("Redis client does not exist", "Redis client information does not exist"),
}

INFORMATION_MISSING = "Redis information does not exist"


def normalize_database(selector: str) -> str:
    """Accept both ``0`` and ``db0`` as the selector for database 0."""
    selector = selector.strip()
    if selector.lower().startswith("db") and selector[2:].isdigit():
        return selector[2:]
    return selector


class Report:
    """Parsed view over the text of a report reply."""

    def __init__(self, text: str):
        self.text = text or ""
        self.lines = split_lines(self.text)

    def entries(self, kind: Optional[ReportKind] = None) -> List[ReportLine]:
        """Return the report lines matching a discriminator.

        Args:
            kind: Line family, or None for every ``field:data`` line

        Returns:
            Lines in report order; lines not matching the discriminator are skipped
        """
        if kind is None:
            parsed = (parse_line(line, INFO_LINE) for line in self.lines)
        elif kind == ReportKind.DATABASE:
            parsed = (parse_line(line, DATABASE_LINE) for line in self.lines)
        elif kind == ReportKind.SLAVE:
            parsed = (parse_line(line, SLAVE_LINE) for line in self.lines)
        else:
            # CLIENT LIST lines are whole multi-value records
            parsed = (ReportLine(field="", data=line) for line in self.lines)
        return [entry for entry in parsed if entry is not None]

    @staticmethod
    def identity(kind: ReportKind, entry: ReportLine) -> Optional[str]:
        """Return the identity a selector is compared against."""
        if kind == ReportKind.DATABASE:
            return entry.field
        if kind == ReportKind.SLAVE:
            ip = resolve_field(entry.field, entry.data, "ip")
            port = resolve_field(entry.field, entry.data, "port")
            if ip is None or port is None:
                return None
            return f"{ip}:{port}"
        return resolve_field(entry.field, entry.data, "addr")

    def lookup(self, search: str) -> Optional[str]:
        """Resolve a field against every line; the first match wins."""
        for entry in self.entries():
            value = entry.resolve(search)
            if value is not None:
                return value
        return None

    def select(self, kind: ReportKind, selector: str) -> ReportLine:
        """Return the first line whose identity equals the selector.

        Raises:
            NotFoundError: If no line of this kind matches
        """
        if kind == ReportKind.DATABASE:
            selector = normalize_database(selector)

        for entry in self.entries(kind):
            if self.identity(kind, entry) == selector:
                return entry

        raise NotFoundError(NOT_FOUND_MESSAGES[kind][0])

    def select_field(
        self, kind: ReportKind, selector: str, search: str, default: Optional[str] = None
    ) -> str:
        """Resolve a field inside the line selected by ``selector``."""
        entry = self.select(kind, selector)
        return resolve_value(entry.resolve(search), default, NOT_FOUND_MESSAGES[kind][1])

    def identities(self, kind: ReportKind, exclude_name: Optional[str] = None) -> List[str]:
        """Return the identity of every line of a kind, in report order.

        Args:
            kind: Line family
            exclude_name: Client connection name to leave out (CLIENT only)
        """
        found = []
        for entry in self.entries(kind):
            if kind == ReportKind.CLIENT and exclude_name is not None:
                if resolve_field(entry.field, entry.data, "name") == exclude_name:
                    continue
            identity = self.identity(kind, entry)
            if identity is not None:
                found.append(identity)
        logger.debug(f"Found {len(found)} {kind.value} entries in report")
        return found


def resolve_value(value: Optional[str], default: Optional[str], message: str) -> str:
    """Fall back to a non-blank default, or raise when nothing was found."""
    if value is not None:
        return value
    if default:
        return default
    raise NotFoundError(message)
