"""
SoundCloud credential module.

Handles the access token cache and public client id discovery.
"""

from .client_id import FALLBACK_CLIENT_ID, ClientIdAcquirer
from .token_store import TokenStore
from .tokens import AccessToken

__all__ = [
    "FALLBACK_CLIENT_ID",
    "ClientIdAcquirer",
    "TokenStore",
    "AccessToken",
]
