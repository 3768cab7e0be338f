from __future__ import annotations

import hashlib
import logging
import threading
from dataclasses import dataclass

from supabase import Client, create_client

from profileready.config import Settings, get_settings
from profileready.domain.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserInfo:
    id: str
    email: str | None


# Process-scoped client, created lazily exactly once
_CLIENT_SINGLETON: Client | None = None
_CLIENT_LOCK = threading.Lock()


def get_supabase_client(settings: Settings | None = None) -> Client | None:
    """Shared Supabase client, or ``None`` when Supabase is disabled or not configured."""
    global _CLIENT_SINGLETON
    settings = settings or get_settings()
    if not settings.supabase_configured:
        return None
    if _CLIENT_SINGLETON is None:
        with _CLIENT_LOCK:
            if _CLIENT_SINGLETON is None:
                logger.info("Initializing Supabase client for %s", settings.SUPABASE_URL)
                _CLIENT_SINGLETON = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _CLIENT_SINGLETON


class SupabaseAuthAdapter:
    """Small wrapper to validate Supabase access tokens.

    When SUPABASE_DISABLED=1, this returns a fake user for any token.
    """

    def __init__(self, client: Client | None, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.disabled = settings.SUPABASE_DISABLED
        self._client = client

    def validate_token(self, token: str) -> UserInfo:
        if not token:
            raise AuthenticationError("Missing access token")
        if self.disabled or self._client is None:
            # Deterministic fake user derived from the token
            fake_id = f"fake-{int(hashlib.sha256(token.encode()).hexdigest(), 16) % (10**10)}"
            return UserInfo(id=fake_id, email=None)
        try:
            res = self._client.auth.get_user(token)
        except Exception as exc:  # network or token errors from the SDK
            raise AuthenticationError(f"Invalid token: {exc}") from exc
        user = res.user if res is not None else None
        if not user:
            raise AuthenticationError("Invalid token")
        return UserInfo(id=user.id, email=user.email)
