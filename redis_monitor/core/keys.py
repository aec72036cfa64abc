"""
Item key parsing and formatting.

Item keys use the monitoring agent syntax ``name[param1,param2,...]``. A
parameter may be quoted (``"a,b"``) to carry commas or brackets; inside quotes
``\\"`` stands for a literal quote.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

MASK = "***"


class ItemKeyError(ValueError):
    """Raised when an item key cannot be parsed."""

    pass


def parse_item_key(text: str) -> Tuple[str, List[str]]:
    """Split an item key into its name and parameters.

    Args:
        text: Full item key, e.g. ``redis.info[,,,,string,server,redis_version,]``

    Returns:
        Tuple of (name, parameters). A key without brackets has no parameters;
        ``name[]`` has a single empty parameter.

    Raises:
        ItemKeyError: If the brackets or quotes are malformed
    """
    text = text.strip()
    if "[" not in text:
        if "]" in text or not text:
            raise ItemKeyError(f"Invalid item key: {text!r}")
        return text, []

    name, _, rest = text.partition("[")
    if not name or not rest.endswith("]"):
        raise ItemKeyError(f"Invalid item key: {text!r}")

    body = rest[:-1]
    params: List[str] = []
    i = 0
    while True:
        while i < len(body) and body[i] == " ":
            i += 1

        if i < len(body) and body[i] == '"':
            value, i = _read_quoted(body, i + 1, text)
            while i < len(body) and body[i] == " ":
                i += 1
            if i < len(body) and body[i] != ",":
                raise ItemKeyError(f"Unexpected character after quoted parameter in {text!r}")
        else:
            end = body.find(",", i)
            end = len(body) if end == -1 else end
            value = body[i:end]
            if "]" in value or '"' in value:
                raise ItemKeyError(f"Unquoted parameter contains a reserved character in {text!r}")
            i = end

        params.append(value)
        if i >= len(body):
            return name, params
        i += 1  # skip the comma


def _read_quoted(body: str, i: int, text: str) -> Tuple[str, int]:
    chars = []
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body) and body[i + 1] == '"':
            chars.append('"')
            i += 2
            continue
        if ch == '"':
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1
    raise ItemKeyError(f"Unterminated quoted parameter in {text!r}")


def _quote(param: str) -> str:
    if any(ch in param for ch in ',]"') or param.startswith(" ") or param.startswith("["):
        return '"' + param.replace('"', '\\"') + '"'
    return param


def format_item_key(
    name: str, params: Sequence[str], masked: Optional[Iterable[int]] = None
) -> str:
    """Render an item key, optionally masking sensitive parameters.

    Args:
        name: Item key name
        params: Parameter values
        masked: Positions whose non-blank values are replaced with ``***``

    Returns:
        The item key text
    """
    hidden = set(masked or ())
    rendered = [
        MASK if index in hidden and value else _quote(value) for index, value in enumerate(params)
    ]
    if not params:
        return name
    return f"{name}[{','.join(rendered)}]"
