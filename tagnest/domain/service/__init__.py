"""Domain services."""

from .base import Service
from .closure_service import ClosureService
from .tag_batch_service import TagBatchService
from .tag_service import TagService
from .taggable_service import TaggableService, count_common

__all__ = [
    "ClosureService",
    "Service",
    "TagBatchService",
    "TagService",
    "TaggableService",
    "count_common",
]
