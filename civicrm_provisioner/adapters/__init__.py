"""Adapters — bindings for external tools.

Public re-exports for convenient access.
"""

from civicrm_provisioner.adapters.base import Adapter, ExecutionContext
from civicrm_provisioner.adapters.mock import MockAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "MockAdapter",
]
