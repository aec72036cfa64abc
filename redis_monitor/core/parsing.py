"""Line-level parsing of Redis text reports.

INFO sections and CLIENT LIST replies are made of lines in one of two shapes:

- single value: ``redis_version:7.0.0`` or ``config_file:`` (no ``=`` in the data)
- multi value: ``db0:keys=1,expires=0,avg_ttl=0`` or
  ``id=3 addr=127.0.0.1:50000 name= ...``

``resolve_field`` looks a named field up inside the data part of a line.
"""

import re
from typing import Optional

from pydantic import BaseModel

# Compiled once at import and shared by every invocation
INFO_LINE = re.compile(r"^([^:]*):(.*)$")
MULTI_VALUE = re.compile(r"^.*=.*$")
SLAVE_LINE = re.compile(r"^slave([0-9]+):(.*)$")
DATABASE_LINE = re.compile(r"^db([0-9]+):(.*)$")

_LINE_BREAKS = re.compile(r"[\r\n]+")


class ReportLine(BaseModel):
    """A ``field:data`` pair taken from one report line."""

    field: str
    data: str

    def resolve(self, search: str) -> Optional[str]:
        return resolve_field(self.field, self.data, search)


def split_lines(text: str) -> list:
    """Split report text on any run of CR/LF characters, dropping empty lines."""
    return [line for line in _LINE_BREAKS.split(text or "") if line]


def parse_line(line: str, pattern: re.Pattern = INFO_LINE) -> Optional[ReportLine]:
    """Apply a discriminator pattern to a line.

    Args:
        line: One report line
        pattern: Pattern with two groups, the field and the data

    Returns:
        ReportLine, or None when the line does not match
    """
    match = pattern.match(line)
    if match is None:
        return None
    return ReportLine(field=match.group(1), data=match.group(2))


def resolve_field(field: str, data: str, search: str) -> Optional[str]:
    """Resolve ``search`` against the data part of a line.

    Multi-value data (anything containing ``=``) is searched for a
    ``search=value`` pair; the value ends at the next comma or space. Any other
    data is a single value and resolves, possibly to an empty string, when the
    line's own field name is ``search``.

    Args:
        field: Field part of the line (before the first colon)
        data: Data part of the line
        search: Field name to resolve

    Returns:
        The resolved value (possibly empty), or None when not found
    """
    if MULTI_VALUE.match(data):
        pair = re.search(r"(?:^|[, ])" + re.escape(search) + r"=([^, ]*)", data)
        if pair is None:
            return None
        return pair.group(1)

    if field == search:
        return data

    return None
