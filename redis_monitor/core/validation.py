"""Parameter validation for item requests."""

import re
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from redis_monitor.core.convert import Datatype
from redis_monitor.core.errors import ParameterError

DATATYPE_PARAM = "Datatype"

_INTEGER = re.compile(r"^\s*[+-]?[0-9]+\s*$")


class ParamSpec(BaseModel):
    """Validation rules for one positional item parameter."""

    arg: str = Field(..., description="Argument name used by item handlers")
    name: str = Field(..., description="Display name used in error messages")
    default: Optional[str] = Field(default=None, description="Value used when left blank")
    allow_empty: bool = Field(default=False, description="Whether a blank value is accepted")
    minimum: Optional[int] = Field(default=None, description="Lowest accepted integer value")
    maximum: Optional[int] = Field(default=None, description="Highest accepted integer value")
    secret: bool = Field(default=False, description="Mask the value in logs")


def _as_integer(value: str) -> Optional[int]:
    if _INTEGER.match(value):
        return int(value)
    return None


def validate_param(spec: ParamSpec, value: Optional[str]) -> str:
    """Validate a single parameter and apply its default.

    Rules are checked in order (default, blank, minimum, maximum, datatype);
    the first violation is the one reported.

    Args:
        spec: Rules for the parameter
        value: Raw value, None when absent

    Returns:
        The value to use

    Raises:
        ParameterError: On the first violated rule
    """
    value = value if value is not None else ""

    if value == "" and spec.default is not None:
        value = spec.default

    if value == "" and not spec.allow_empty:
        raise ParameterError(f"{spec.name} must not be empty")

    if spec.minimum is not None or spec.maximum is not None:
        number = _as_integer(value)
        if spec.minimum is not None and (number is None or number < spec.minimum):
            raise ParameterError(
                f"{spec.name} must be an integer greater than or equal to {spec.minimum}"
            )
        if spec.maximum is not None and (number is None or number > spec.maximum):
            raise ParameterError(
                f"{spec.name} must be an integer less than or equal to {spec.maximum}"
            )

    if spec.name == DATATYPE_PARAM and value not in {d.value for d in Datatype}:
        raise ParameterError(f"{spec.name} must be an {Datatype.names()}")

    return value


def validate_params(specs: Sequence[ParamSpec], params: Sequence[str]) -> List[str]:
    """Validate a full parameter list against an item's parameter specs.

    Raises:
        ParameterError: If the count is wrong or any parameter is invalid
    """
    if len(params) != len(specs):
        raise ParameterError(
            f"Invalid parameter count specified, expected {len(specs)} received {len(params)}"
        )
    return [validate_param(spec, value) for spec, value in zip(specs, params)]
