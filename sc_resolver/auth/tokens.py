"""
Access token for SoundCloud's client-credentials grant.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

# Treat tokens as expired this long before the platform does
EXPIRY_MARGIN_S = 300
DEFAULT_EXPIRES_IN_S = 3600


@dataclass(frozen=True)
class AccessToken:
    """OAuth access token with expiration."""

    token: str
    expires_at: float  # Epoch seconds

    def is_valid(self, now: Optional[float] = None, margin_s: float = EXPIRY_MARGIN_S) -> bool:
        """Check the token will not expire within the margin."""
        if not self.token:
            return False
        if now is None:
            now = time.time()
        return now < self.expires_at - margin_s

    @property
    def authorization(self) -> str:
        """Value for the Authorization header."""
        return f"OAuth {self.token}"

    @classmethod
    def from_exchange(cls, payload: Any, now: Optional[float] = None) -> Optional["AccessToken"]:
        """Create from a token endpoint response body."""
        if not isinstance(payload, dict):
            return None
        token = payload.get("access_token")
        if not token or not isinstance(token, str):
            return None
        expires_in = payload.get("expires_in") or DEFAULT_EXPIRES_IN_S
        try:
            expires_in = float(expires_in)
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN_S
        if now is None:
            now = time.time()
        return cls(token=token, expires_at=now + expires_in)
