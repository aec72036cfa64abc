"""Conversion of extracted text into typed item values."""

import math
import re
from enum import Enum
from typing import Union

from redis_monitor.core.errors import ProtocolError

_INTEGER = re.compile(r"^\s*[+-]?[0-9]+\s*$")


class Datatype(str, Enum):
    """Value types an item can report."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    TEXT = "text"

    @classmethod
    def names(cls) -> str:
        return ",".join(member.value for member in cls)


def convert_value(value: str, datatype: Union[Datatype, str]) -> Union[int, float, str]:
    """Convert text to the requested datatype.

    Args:
        value: Text extracted from a reply
        datatype: Target datatype

    Returns:
        int, float or the unchanged string

    Raises:
        ProtocolError: If the text is not a valid number for a numeric datatype
    """
    datatype = Datatype(datatype)

    if datatype == Datatype.INTEGER:
        if not _INTEGER.match(value):
            raise ProtocolError(f"Redis value ({value}) is not a valid {datatype.value}")
        return int(value)

    if datatype == Datatype.FLOAT:
        try:
            number = float(value)
        except ValueError as e:
            raise ProtocolError(f"Redis value ({value}) is not a valid {datatype.value}") from e
        if "_" in value or math.isnan(number) or math.isinf(number):
            raise ProtocolError(f"Redis value ({value}) is not a valid {datatype.value}")
        return number

    return value
