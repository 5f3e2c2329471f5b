"""HTTP adapters for Steamgraph.

This package provides the keyed, throttled HTTP client used to talk to the
Steam Web API.
"""

from .client import DEFAULT_BASE_URL, RateLimiter, SteamApiError, SteamHttpClient

__all__ = [
    "DEFAULT_BASE_URL",
    "RateLimiter",
    "SteamApiError",
    "SteamHttpClient",
]
