"""Persistent login session: auth token, user id and onboarding flag."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pranayam_client.exceptions import AuthError

logger = logging.getLogger(__name__)

KEY_AUTH_TOKEN = "auth_token"
KEY_USER_ID = "user_id"
KEY_ONBOARDING_COMPLETE = "onboarding_complete"


class SessionStore:
    """Small JSON-file key store for the signed-in user's session.

    Args:
        path: Where the session JSON is persisted. Written with 0600 perms.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data))
            os.chmod(self.path, 0o600)
        except OSError as e:
            raise AuthError(f"Failed to write session file {self.path}: {e}") from e

    def _put(self, key: str, value) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def save_auth_token(self, token: str) -> None:
        self._put(KEY_AUTH_TOKEN, token)

    def save_user_id(self, user_id: str) -> None:
        self._put(KEY_USER_ID, user_id)

    def save_onboarding_complete(self, complete: bool) -> None:
        self._put(KEY_ONBOARDING_COMPLETE, bool(complete))

    def get_auth_token(self) -> str | None:
        return self._load().get(KEY_AUTH_TOKEN)

    def get_user_id(self) -> str | None:
        return self._load().get(KEY_USER_ID)

    def require_user_id(self) -> str:
        """Return the signed-in user id or raise AuthError."""
        user_id = self.get_user_id()
        if not user_id:
            raise AuthError("No signed-in user. Verify an OTP first.")
        return user_id

    def is_onboarding_complete(self) -> bool:
        return bool(self._load().get(KEY_ONBOARDING_COMPLETE, False))

    def is_logged_in(self) -> bool:
        return self.get_auth_token() is not None

    def logout(self) -> None:
        """Forget everything, including the onboarding flag."""
        if self.path.exists():
            self.path.unlink()
        logger.info("Session cleared")
