import logging

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from .exceptions import Unauthorized

logger = logging.getLogger(__name__)


def resolve_user(request):
    """Resolve the caller from `Authorization: Bearer <access token>`."""
    try:
        result = JWTAuthentication().authenticate(request)
    except (InvalidToken, TokenError, AuthenticationFailed) as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise Unauthorized() from exc
    if result is None:
        raise Unauthorized()
    user, _token = result
    if not user.is_active:
        raise Unauthorized()
    return user


def list_roles(user) -> list[str]:
    """Role names for the settings UI: group names, plus 'admin' for superusers."""
    roles = list(user.groups.order_by('name').values_list('name', flat=True))
    if user.is_superuser and 'admin' not in roles:
        roles.insert(0, 'admin')
    return roles
