"""
app/repositories/dataset_store.py

In-memory, write-once store for normalized dataset records.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence

from app.domain.sustainability import NormalizedRecord

logger = logging.getLogger(__name__)

RecordLoader = Callable[[], Sequence[NormalizedRecord]]


class DatasetStore:
    """
    Single source of truth for the loaded dataset.

    The store starts empty and unloaded. :meth:`load` runs a loader at most
    once to completion; afterwards the record tuple never changes. A loader
    that raises leaves the store empty and unloaded. Callers that were
    already waiting on that attempt re-raise its error; a later call retries.
    """

    def __init__(self) -> None:
        self._records: tuple[NormalizedRecord, ...] = ()
        self._loaded = False
        self._lock = threading.Lock()
        self._failed_attempts = 0
        self._last_error: BaseException | None = None

    def all(self) -> tuple[NormalizedRecord, ...]:
        """
        Return every stored record in source order.
        """

        return self._records

    def is_loaded(self) -> bool:
        return self._loaded

    def load(self, loader: RecordLoader) -> bool:
        """
        Populate the store from *loader* unless it is already loaded.

        Concurrent callers serialize on the store lock and share one attempt:
        the first runs the loader, the rest wait and then observe its outcome,
        either the loaded state or the same exception.

        Returns
        -------
        True when this call populated the store, False when it was a no-op.
        """

        if self._loaded:
            return False

        seen_failures = self._failed_attempts
        with self._lock:
            if self._loaded:
                return False
            if self._failed_attempts != seen_failures and self._last_error is not None:
                raise self._last_error
            try:
                records = tuple(loader())
            except Exception as exc:
                self._last_error = exc
                self._failed_attempts += 1
                raise
            self._last_error = None
            self._records = records
            self._loaded = True

        logger.info("Dataset store populated records=%s", len(records))
        return True

    def __len__(self) -> int:
        return len(self._records)
