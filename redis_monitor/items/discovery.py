"""Low-level discovery documents.

Discovery items return ``{"data": [{"{#MACRO}": "value"}, ...]}``; the agent
creates one set of dependent items per row.
"""

import json
import logging
from typing import Dict, List, Sequence

logger = logging.getLogger(__name__)


def macro(name: str) -> str:
    return "{#" + name.upper() + "}"


def discovery_document(rows: Sequence[Dict[str, str]]) -> str:
    """Serialize discovery rows, keeping the row order."""
    logger.debug(f"Discovered {len(rows)} instances")
    return json.dumps({"data": list(rows)})


def single_macro_document(name: str, values: Sequence[str]) -> str:
    """Build a document where every row carries one macro."""
    rows: List[Dict[str, str]] = [{macro(name): value} for value in values]
    return discovery_document(rows)
