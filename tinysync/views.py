import json
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .config import TinySyncConfig
from .exceptions import TinySyncError, ValidationError
from .identity import list_roles, resolve_user
from .sync import SyncRequest, TinySync, truncate

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


def _with_cors(response):
    for name, value in CORS_HEADERS.items():
        response[name] = value
    return response


def _error_response(message):
    return _with_cors(JsonResponse({'ok': False, 'error': message}, status=500))


def _parse_body(request):
    try:
        return json.loads(request.body or b'{}')
    except ValueError as exc:
        raise ValidationError('Request body must be valid JSON') from exc


@csrf_exempt
def tiny_sync_view(request):
    """
    POST /functions/v1/tiny-sync

    Body: {"entity": "products", "dryRun": true, "since": "...", "testOnly": false}
    Every failure answers 500 with {"ok": false, "error": message}.
    """
    if request.method == 'OPTIONS':
        return _with_cors(HttpResponse('ok'))

    try:
        if request.method != 'POST':
            raise ValidationError(f"Method {request.method} not allowed")
        user = resolve_user(request)
        sync_request = SyncRequest.from_payload(_parse_body(request))
        runner = TinySync(TinySyncConfig.from_settings())
        body = runner.run(sync_request, user=user)
    except TinySyncError as exc:
        logger.error("[tiny-sync] %s", truncate(exc))
        return _error_response(str(exc))
    except Exception as exc:
        logger.exception("[tiny-sync] unexpected error: %s", truncate(exc))
        return _error_response(str(exc) or 'Unknown error')

    return _with_cors(JsonResponse(body))


@csrf_exempt
def user_roles_view(request):
    """GET /functions/v1/user-roles -> {"ok": true, "roles": ["admin", ...]}"""
    if request.method == 'OPTIONS':
        return _with_cors(HttpResponse('ok'))

    try:
        user = resolve_user(request)
    except TinySyncError as exc:
        return _error_response(str(exc))
    return _with_cors(JsonResponse({'ok': True, 'roles': list_roles(user)}))
