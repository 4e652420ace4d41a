# auth_service/ratelimit.py
"""Per-IP request ceilings, one limiter per application.

Every router in a scope shares one counter per client address: a request to
``/auth/login`` and one to ``/auth/forgot-password`` draw from the same
bucket.
"""
from fastapi import Request, status
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from .errors import ApiError

AUTH_SCOPE = "auth"
API_SCOPE = "api"

MESSAGES = {
    AUTH_SCOPE: "Too many login attempts, please try again after 15 minutes",
    API_SCOPE: "Too many requests, please try again later",
}


class RateLimiter:
    def __init__(self, auth_limit, api_limit, enabled=True, storage=None):
        self.enabled = enabled
        self.storage = storage or MemoryStorage()
        self.strategy = FixedWindowRateLimiter(self.storage)
        self.limits = {AUTH_SCOPE: parse(auth_limit), API_SCOPE: parse(api_limit)}

    @classmethod
    def from_config(cls, config):
        return cls(
            auth_limit=config.AUTH_RATE_LIMIT,
            api_limit=config.API_RATE_LIMIT,
            enabled=config.RATE_LIMIT_ENABLED,
        )

    def hit(self, scope, client_key):
        """Count one request; False once the client is over the ceiling."""
        if not self.enabled:
            return True
        return self.strategy.hit(self.limits[scope], scope, client_key)

    def reset(self):
        self.storage.reset()


def client_address(request: Request):
    return request.client.host if request.client else "unknown"


def _scope_limit(scope):
    def check_rate_limit(request: Request):
        if not request.app.state.rate_limiter.hit(scope, client_address(request)):
            raise ApiError(status.HTTP_429_TOO_MANY_REQUESTS, MESSAGES[scope])

    return check_rate_limit


auth_rate_limit = _scope_limit(AUTH_SCOPE)
api_rate_limit = _scope_limit(API_SCOPE)
