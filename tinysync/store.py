import logging
from contextlib import contextmanager

from django.db import DatabaseError

from .exceptions import DataStoreError
from .models import Contact, Order, Product, SyncLog

logger = logging.getLogger(__name__)

MODELS = {
    'contacts': Contact,
    'products': Product,
    'orders': Order,
}


def _error_kind(exc: DatabaseError) -> str:
    message = str(exc).lower()
    if 'no such table' in message or ('relation' in message and 'does not exist' in message):
        return DataStoreError.RELATION_MISSING
    if 'permission denied' in message:
        return DataStoreError.PERMISSION_DENIED
    return DataStoreError.OTHER


@contextmanager
def _translate_errors(table: str):
    try:
        yield
    except DatabaseError as exc:
        kind = _error_kind(exc)
        logger.error("Data store error on %s (%s): %s", table, kind, exc)
        raise DataStoreError(f"Data store error on {table}: {exc}", kind=kind) from exc


class SyncStore:
    """Point reads and writes the sync job performs against local tables."""

    def find_linked(self, mapping, remote_id: str):
        """Return `(pk, tiny_hash)` of the row linked to `remote_id`, or None."""
        model = MODELS[mapping.entity]
        with _translate_errors(model._meta.db_table):
            row = (
                model.objects
                .filter(**{mapping.linkage_field: remote_id})
                .values_list('pk', 'tiny_hash')
                .first()
            )
        return row

    def insert(self, mapping, payload: dict):
        model = MODELS[mapping.entity]
        with _translate_errors(model._meta.db_table):
            return model.objects.create(**payload)

    def update(self, mapping, pk, payload: dict) -> int:
        model = MODELS[mapping.entity]
        with _translate_errors(model._meta.db_table):
            return model.objects.filter(pk=pk).update(**payload)

    def log_run(self, **fields) -> SyncLog:
        with _translate_errors(SyncLog._meta.db_table):
            return SyncLog.objects.create(**fields)
