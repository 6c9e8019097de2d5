"""Per-repository operations run by the manager."""

from .base import Operation
from .sync import SyncOperation
from .status import StatusOperation

__all__ = [
    'Operation',
    'SyncOperation',
    'StatusOperation',
]
