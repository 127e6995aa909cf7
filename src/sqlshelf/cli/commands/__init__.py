"""Command implementations for sqlshelf CLI."""

from .check import handle_check
from .migrate import handle_downgrade, handle_upgrade, handle_version

__all__ = [
    "handle_check",
    "handle_downgrade",
    "handle_upgrade",
    "handle_version",
]
