"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address. Only the endpoints that spend a
Gemini call opt in:

    @router.post("/refresh")
    @limiter.limit("10/minute")
    async def refresh_dashboard(request: Request, ...):
        ...

Wired into the app in main.py via app.state.limiter and the
RateLimitExceeded exception handler.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
