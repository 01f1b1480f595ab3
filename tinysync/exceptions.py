class TinySyncError(Exception):
    """Base class for every failure surfaced by a sync invocation."""


class ConfigurationError(TinySyncError):
    pass


class ValidationError(TinySyncError):
    pass


class Unauthorized(TinySyncError):
    def __init__(self, message='Unauthorized'):
        super().__init__(message)


class RateLimitExceeded(TinySyncError):
    pass


class RemoteUnavailable(TinySyncError):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class RemoteError(TinySyncError):
    pass


class AuthenticationError(RemoteError):
    pass


class DataStoreError(TinySyncError):
    RELATION_MISSING = 'relation_missing'
    PERMISSION_DENIED = 'permission_denied'
    OTHER = 'other'

    def __init__(self, message, kind=OTHER):
        super().__init__(message)
        self.kind = kind
