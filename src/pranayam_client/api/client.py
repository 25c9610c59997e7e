"""Pranayam REST API client with sync and async interfaces."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from pranayam_client.api.models import (
    AuthResponse,
    LikeResponse,
    OtpResponse,
    Profile,
    ProfileUpdate,
    SwipeType,
)
from pranayam_client.api.parser import (
    parse_auth_response,
    parse_conversation,
    parse_like_response,
    parse_message,
    parse_otp_response,
    parse_profile,
)
from pranayam_client.auth.session import SessionStore
from pranayam_client.chat.models import ContentType, Conversation, Message
from pranayam_client.config import ClientConfig
from pranayam_client.exceptions import (
    HTTPStatusError,
    ResponseFormatError,
    TransportError,
)

logger = logging.getLogger(__name__)

# Endpoints reachable before a token exists.
_UNAUTHENTICATED_PATHS = {"auth/send-otp", "auth/verify-otp"}

DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_DISTANCE_KM = 50


class PranayamAPI:
    """Client for the Pranayam REST API.

    Args:
        config: Base URL and timeout. Defaults to ``ClientConfig.from_env()``.
        session: Where the bearer token is read from and, after
            ``verify_otp``, written to. Without one, requests go unauthenticated.
        transport: Optional httpx transport (used by tests to stub the server).
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: SessionStore | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config or ClientConfig.from_env()
        self.session = session
        self._http = httpx.Client(
            base_url=self.config.api_base_url,
            timeout=self.config.timeout,
            transport=transport,
            headers={"Accept": "application/json", "User-Agent": "PranayamClient/1.0"},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> PranayamAPI:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _auth_headers(self, path: str) -> dict[str, str]:
        if path in _UNAUTHENTICATED_PATHS or self.session is None:
            return {}
        token = self.session.get_auth_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Perform one request and return the decoded JSON body.

        Request failures become TransportError, non-2xx statuses become
        HTTPStatusError, and undecodable or unparseable bodies become
        ResponseFormatError.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        logger.debug(f"{method} {path} params={params}")
        try:
            response = self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._auth_headers(path),
            )
        except httpx.DecodingError as e:
            raise ResponseFormatError(f"{method} {path} body could not be decoded: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise HTTPStatusError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            raise ResponseFormatError(f"{method} {path} returned an empty body")
        try:
            body = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"{method} {path} returned invalid JSON: {e}") from e
        if body is None:
            raise ResponseFormatError(f"{method} {path} returned a null body")
        return body

    @staticmethod
    def _require_list(body: Any, path: str) -> list:
        if not isinstance(body, list):
            raise ResponseFormatError(f"{path} returned {type(body).__name__}, expected list")
        return body

    # ---- Auth ----

    def send_otp(self, phone_number: str) -> OtpResponse:
        """Ask the backend to text a one-time password to ``phone_number``."""
        body = self._request("POST", "auth/send-otp", json={"phoneNumber": phone_number})
        return parse_otp_response(body)

    def verify_otp(self, phone_number: str, otp: str) -> AuthResponse:
        """Exchange an OTP for an access token; persists it to the session."""
        body = self._request(
            "POST", "auth/verify-otp", json={"phoneNumber": phone_number, "otp": otp}
        )
        auth = parse_auth_response(body)
        if self.session is not None:
            self.session.save_auth_token(auth.access_token)
            self.session.save_user_id(auth.user.id)
            logger.info(f"Signed in as user {auth.user.id}")
        return auth

    def update_profile(self, update: ProfileUpdate) -> Profile:
        body = self._request("PUT", "auth/profile", json=update.to_payload())
        return parse_profile(body)

    # ---- Discovery ----

    def get_discovery_profiles(
        self,
        user_id: str,
        latitude: float | None = None,
        longitude: float | None = None,
        max_distance: int = DEFAULT_MAX_DISTANCE_KM,
    ) -> list[Profile]:
        """Fetch recommended profiles near a location (ranking is server-side)."""
        path = "discovery/recommendations"
        body = self._request(
            "GET",
            path,
            params={
                "userId": user_id,
                "lat": latitude,
                "long": longitude,
                "distance": max_distance,
            },
        )
        return [parse_profile(item) for item in self._require_list(body, path)]

    def swipe_profile(
        self, user_id: str, target_id: str, swipe_type: SwipeType | str
    ) -> LikeResponse:
        swipe = SwipeType(str(getattr(swipe_type, "value", swipe_type)).upper())
        body = self._request(
            "POST",
            "discovery/swipe",
            json={"userId": user_id, "targetId": target_id, "type": swipe.value},
        )
        return parse_like_response(body)

    # ---- Chat ----

    def get_conversations(self) -> list[Conversation]:
        body = self._request("GET", "conversations")
        return [parse_conversation(item) for item in self._require_list(body, "conversations")]

    def get_messages(
        self,
        conversation_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        before: str | None = None,
    ) -> list[Message]:
        """Fetch one page of history, optionally older than ``before``."""
        path = f"conversations/{conversation_id}/messages"
        body = self._request("GET", path, params={"limit": limit, "before": before})
        return [
            parse_message(item, conversation_id=conversation_id)
            for item in self._require_list(body, path)
        ]

    def send_message(
        self,
        conversation_id: str,
        text: str,
        content_type: ContentType = ContentType.TEXT,
    ) -> Message:
        """Post a message; returns the server's record (server id and timestamp)."""
        body = self._request(
            "POST",
            f"conversations/{conversation_id}/messages",
            json={"text": text, "type": content_type.value},
        )
        return parse_message(body, conversation_id=conversation_id)

    # ---- Async wrappers (asyncio.to_thread) ----

    async def asend_otp(self, phone_number: str) -> OtpResponse:
        """Async version of send_otp."""
        return await asyncio.to_thread(self.send_otp, phone_number)

    async def averify_otp(self, phone_number: str, otp: str) -> AuthResponse:
        """Async version of verify_otp."""
        return await asyncio.to_thread(self.verify_otp, phone_number, otp)

    async def aget_discovery_profiles(self, user_id: str, **kwargs) -> list[Profile]:
        """Async version of get_discovery_profiles."""
        return await asyncio.to_thread(self.get_discovery_profiles, user_id, **kwargs)

    async def aswipe_profile(
        self, user_id: str, target_id: str, swipe_type: SwipeType | str
    ) -> LikeResponse:
        """Async version of swipe_profile."""
        return await asyncio.to_thread(self.swipe_profile, user_id, target_id, swipe_type)

    async def aget_conversations(self) -> list[Conversation]:
        """Async version of get_conversations."""
        return await asyncio.to_thread(self.get_conversations)

    async def aget_messages(self, conversation_id: str, **kwargs) -> list[Message]:
        """Async version of get_messages."""
        return await asyncio.to_thread(self.get_messages, conversation_id, **kwargs)
