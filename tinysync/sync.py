"""
On-demand reconciliation of Tiny ERP entities into local tables.

One invocation fetches a single page of contacts, products or orders, hashes
the synced fields of every record and compares the hash with the one stored
on the linked local row:

  - same hash            -> skipped, nothing written
  - different / no row   -> update / create (unless dry-run)

A `SyncLog` row with the counters and the full change summary is written
once the loop completes. Writes and the log share one transaction, so a
failure halfway through leaves no trace of the attempt.
"""
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Optional

from django.db import transaction
from django.utils import timezone

from .config import TinySyncConfig, validate_token
from .exceptions import ValidationError
from .models import SyncLog
from .pagination import FirstPageOnly
from .store import SyncStore
from .tiny_client import TinyClient
from .transformer import MAPPINGS

logger = logging.getLogger(__name__)

ENTITIES = tuple(MAPPINGS)
SUMMARY_PREVIEW = 10
LOG_MESSAGE_LIMIT = 200


def truncate(message, limit: int = LOG_MESSAGE_LIMIT) -> str:
    return str(message)[:limit]


@dataclass
class SyncRequest:
    entity: Optional[str] = None
    dry_run: bool = False
    since: Optional[str] = None
    test_only: bool = False

    @classmethod
    def from_payload(cls, payload) -> 'SyncRequest':
        """Build a request from the JSON body (`entity`, `dryRun`, `since`, `testOnly`)."""
        if not isinstance(payload, dict):
            raise ValidationError('Request body must be a JSON object')
        since = payload.get('since')
        if since is not None and not isinstance(since, str):
            raise ValidationError('"since" must be a string')
        return cls(
            entity=payload.get('entity'),
            dry_run=bool(payload.get('dryRun')),
            since=since or None,
            test_only=bool(payload.get('testOnly')),
        )

    def validate(self):
        if self.entity not in ENTITIES:
            raise ValidationError(
                f"Invalid entity type {self.entity!r}; expected one of {', '.join(ENTITIES)}"
            )


@dataclass
class SyncStats:
    items_processed: int = 0
    items_created: int = 0
    items_updated: int = 0
    items_skipped: int = 0
    api_calls_used: int = 0
    max_calls: int = 0

    def as_dict(self) -> dict:
        return {
            'itemsProcessed': self.items_processed,
            'itemsCreated': self.items_created,
            'itemsUpdated': self.items_updated,
            'itemsSkipped': self.items_skipped,
            'apiCallsUsed': self.api_calls_used,
            'maxCalls': self.max_calls,
        }


@dataclass
class SyncResult:
    entity: str
    dry_run: bool
    stats: SyncStats
    summary: list = field(default_factory=list)
    log: Optional[SyncLog] = None

    def as_response(self) -> dict:
        return {
            'ok': True,
            'dryRun': self.dry_run,
            'entity': self.entity,
            'stats': self.stats.as_dict(),
            'summary': self.summary[:SUMMARY_PREVIEW],
        }


class TinySync:
    """
    Runs one sync invocation.

    `config` is injected instead of read from the environment; `store`,
    `pages` and `client_factory` can be swapped in tests. `atomic=False`
    falls back to independent point writes (partial commit on failure).
    """

    def __init__(self, config: TinySyncConfig, store=None, pages=None,
                 client_factory=TinyClient, atomic=True):
        self.config = config
        self.store = store or SyncStore()
        self.pages = pages or FirstPageOnly(config.page_size)
        self.client_factory = client_factory
        self.atomic = atomic

    def run(self, request: SyncRequest, user=None) -> dict:
        """Dispatch a request and return the success response body."""
        validate_token(self.config.api_token)
        if request.test_only:
            return self.test_connection()
        request.validate()
        return self.sync(request, user=user).as_response()

    def test_connection(self) -> dict:
        client = self.client_factory(self.config)
        retorno = client.account_info()
        account_name = retorno.get('nome_empresa') or retorno.get('razao_social') or 'Empresa'
        logger.info("[tiny-sync] connection ok, account=%s", truncate(account_name))
        return {
            'ok': True,
            'message': 'Connected to Tiny ERP',
            'accountInfo': {'name': account_name},
        }

    def sync(self, request: SyncRequest, user=None) -> SyncResult:
        request.validate()
        mapping = MAPPINGS[request.entity]
        logger.info(truncate(
            f"[tiny-sync] {'DRY-RUN' if request.dry_run else 'APPLY'} "
            f"{request.entity} since={request.since or 'all'}"
        ))

        client = self.client_factory(self.config)
        stats = SyncStats(max_calls=self.config.max_calls)
        records = self.pages.fetch(client, mapping.endpoint, mapping.list_key, mapping.item_key)
        stats.api_calls_used = client.calls_used

        unit_of_work = transaction.atomic() if self.atomic else contextlib.nullcontext()
        with unit_of_work:
            summary = self._reconcile(mapping, records, stats, request.dry_run)
            stats.api_calls_used = client.calls_used
            log = self.store.log_run(
                entity_type=request.entity,
                operation=SyncLog.OPERATION_DRY_RUN if request.dry_run else SyncLog.OPERATION_APPLY,
                status='success',
                items_processed=stats.items_processed,
                items_created=stats.items_created,
                items_updated=stats.items_updated,
                items_skipped=stats.items_skipped,
                api_calls_used=stats.api_calls_used,
                summary=summary,
                created_by=user,
            )

        logger.info(truncate(
            f"[tiny-sync] {request.entity}: processed={stats.items_processed}, "
            f"created={stats.items_created}, updated={stats.items_updated}, "
            f"skipped={stats.items_skipped}, calls={stats.api_calls_used}"
        ))
        return SyncResult(
            entity=request.entity,
            dry_run=request.dry_run,
            stats=stats,
            summary=summary,
            log=log,
        )

    def _reconcile(self, mapping, records, stats: SyncStats, dry_run: bool) -> list:
        summary = []
        for record in records:
            stats.items_processed += 1
            remote_id = mapping.remote_id(record)
            if remote_id is None:
                # Without a linkage id the record can neither be matched nor linked.
                logger.warning("%s without Tiny id – skipping: %s",
                               mapping.singular, truncate(record))
                stats.items_skipped += 1
                continue
            new_hash = mapping.content_hash(record)

            existing = self.store.find_linked(mapping, remote_id)
            if existing is not None and existing[1] == new_hash:
                logger.debug("%s %s unchanged – skipping.", mapping.singular, remote_id)
                stats.items_skipped += 1
                continue

            payload = mapping.to_local(record)
            payload['tiny_synced_at'] = timezone.now()
            payload['tiny_hash'] = new_hash

            action = 'update' if existing is not None else 'create'
            summary.append(mapping.summary_entry(record, action))

            if dry_run:
                continue
            if existing is not None:
                self.store.update(mapping, existing[0], payload)
                stats.items_updated += 1
            else:
                self.store.insert(mapping, payload)
                stats.items_created += 1
            logger.debug("%s %s %sd.", mapping.singular, remote_id, action)
        return summary
