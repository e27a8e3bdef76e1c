# File: portfolio_api/core/rate_limiter.py

"""
Per-IP rate limiting for everything under ``/api``.

The slowapi ``Limiter`` owns the counters (in-memory, fixed window). The
limit is enforced by ``enforce_rate_limit``, a dependency attached to the
API router, so it covers every route the router includes regardless of how
FastAPI nests them.
"""

import logging
import time

from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

SCOPE = "api"


def build_limiter(config: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[config.default_rate_limit],
        enabled=config.rate_limit_enabled,
        strategy="fixed-window",
    )


def enforce_rate_limit(request: Request) -> None:
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return

    config: Settings = request.app.state.settings
    item = parse(config.default_rate_limit)
    key = get_remote_address(request)

    if not limiter.limiter.hit(item, SCOPE, key):
        reset_at, _ = limiter.limiter.get_window_stats(item, SCOPE, key)
        retry_after = max(int(reset_at - time.time()), 1)
        logger.warning("Rate limit %s exceeded for %s", item, key)
        raise RateLimitedError(retry_after)
