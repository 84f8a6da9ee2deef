"""
app/repositories package marker.
"""

from app.repositories.dataset_store import DatasetStore, RecordLoader

__all__ = [
    "DatasetStore",
    "RecordLoader",
]
