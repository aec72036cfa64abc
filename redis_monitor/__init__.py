"""Redis Monitor - Redis metrics collection for monitoring agents."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("redis-monitor")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"  # Fallback for development without install
