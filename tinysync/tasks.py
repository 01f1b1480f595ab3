import logging

from celery import shared_task
from django.contrib.auth import get_user_model

from .config import TinySyncConfig
from .exceptions import TinySyncError
from .sync import SyncRequest, TinySync, truncate

logger = logging.getLogger(__name__)


@shared_task(name='tinysync.sync_entity')
def sync_entity_task(entity, dry_run=False, since=None, user_id=None):
    """
    Run one Tiny sync in a worker.

    Returns the same body the HTTP function answers with; failures come back
    as {'ok': False, 'error': message} rather than as task exceptions, since
    a retry inside the same budget would fail the same way.
    """
    user = None
    if user_id is not None:
        user = get_user_model().objects.filter(pk=user_id).first()

    request = SyncRequest(entity=entity, dry_run=dry_run, since=since)
    try:
        return TinySync(TinySyncConfig.from_settings()).run(request, user=user)
    except TinySyncError as exc:
        logger.error("[tiny-sync] task failed: %s", truncate(exc))
        return {'ok': False, 'error': str(exc)}
    except Exception as exc:
        logger.exception("[tiny-sync] task failed unexpectedly: %s", truncate(exc))
        return {'ok': False, 'error': str(exc) or 'Unknown error'}
