"""On-disk storage for saved layouts."""

from .layouts import LayoutFileStore

__all__ = [
    "LayoutFileStore",
]
