"""Item definitions and the generic item runner."""

from redis_monitor.items.models import ItemResult, ItemStatus
from redis_monitor.items.orchestrator import run_item

__all__ = ["ItemResult", "ItemStatus", "run_item"]
