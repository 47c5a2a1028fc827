"""Per-client request limits for the credential endpoints (login, register)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from coinfolio.config import settings

# Shared by main (state + 429 handler) and the routers that decorate endpoints
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

LOGIN_LIMIT = settings.login_rate_limit
REGISTER_LIMIT = settings.register_rate_limit
