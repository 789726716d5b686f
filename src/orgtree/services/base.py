"""BaseService — the Store-holding parent of every service.

Services read a fresh snapshot from the store on every call and keep no
mutable state between calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from orgtree.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from orgtree.infrastructure.store import Store, StoreError

logger = logging.getLogger(__name__)


class BaseService:
    def __init__(self, store: Store) -> None:
        self._store = store

    @staticmethod
    def _store_failure(op: str, exc: StoreError) -> ServiceResult:
        """A data-access failure aborts the whole operation; no partial payload."""
        logger.error("%s aborted: %s", op, exc)
        return ServiceResult.failure(op, ErrorCode.STORE_ERROR, str(exc))

    @staticmethod
    def _not_found(op: str, what: str, ident: object) -> ServiceResult:
        return ServiceResult.failure(op, ErrorCode.NOT_FOUND, f"{what} '{ident}' not found")
