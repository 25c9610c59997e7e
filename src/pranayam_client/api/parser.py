"""Parse raw REST / socket JSON payloads into client models."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import dateutil.parser as dateparser

from pranayam_client.api.models import (
    AuthResponse,
    LikeResponse,
    OtpResponse,
    Profile,
    Prompt,
    UserInfo,
)
from pranayam_client.chat.models import (
    ContentType,
    Conversation,
    Message,
    MessageStatus,
    MessageType,
)
from pranayam_client.exceptions import ResponseFormatError

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def normalize_timestamp(value) -> str:
    """Normalize a server timestamp to a fixed-width ISO 8601 UTC string.

    Fixed width keeps lexical order equal to chronological order, which the
    message store relies on for ``ORDER BY timestamp``. Accepts ISO strings,
    free-form dates and epoch seconds or milliseconds. Anything unparseable
    (including the server's "Just now") becomes the current time.
    """
    if value is None or value == "":
        return utc_now()
    try:
        if isinstance(value, (int, float)):
            ts = value / 1000 if value > 1e11 else value
            dt = datetime.fromtimestamp(ts, tz=timezone.utc)
        else:
            dt = dateparser.parse(str(value))
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.debug("Unparseable timestamp %r, using current time", value)
        return utc_now()
    return dt.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def _require_mapping(raw, kind: str) -> dict:
    if not isinstance(raw, dict):
        raise ResponseFormatError(f"Expected {kind} object, got {type(raw).__name__}")
    return raw


def _enum_or_default(enum_cls, value, default):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        return default


def _str_field(raw: dict, key: str, kind: str) -> str | None:
    """Read an optional scalar as text; numbers are stringified, containers rejected."""
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ResponseFormatError(
        f"{kind} field {key!r} has unexpected type {type(value).__name__}"
    )


def _int_field(raw: dict, key: str, kind: str, default: int | None = 0) -> int | None:
    value = raw.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ResponseFormatError(f"{kind} field {key!r} is a boolean, expected a number")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ResponseFormatError(f"{kind} field {key!r} is not a number: {value!r}") from e


def _str_list(raw: dict, key: str, kind: str) -> list[str]:
    value = raw.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ResponseFormatError(f"{kind} field {key!r} must be a list of strings")
    return list(value)


def parse_message(
    raw: dict,
    conversation_id: str | None = None,
    current_user_id: str | None = None,
) -> Message:
    """Build a Message from a REST history item or a socket ``new_message``.

    Socket payloads carry ``content``/``senderId`` instead of
    ``text``/``isSent``; direction is then derived from ``current_user_id``.
    Fields of the wrong type raise ResponseFormatError.
    """
    raw = _require_mapping(raw, "message")
    message_id = _str_field(raw, "id", "Message") or _str_field(raw, "_id", "Message")
    conv_id = conversation_id or _str_field(raw, "conversationId", "Message")
    if not message_id:
        raise ResponseFormatError("Message payload has no id")
    if not conv_id:
        raise ResponseFormatError(f"Message {message_id} has no conversation id")

    text = _str_field(raw, "text", "Message")
    if text is None:
        text = _str_field(raw, "content", "Message") or ""

    if "isSent" in raw:
        is_sent = bool(raw["isSent"])
    else:
        sender = raw.get("senderId")
        is_sent = bool(current_user_id) and sender == current_user_id

    return Message(
        id=message_id,
        conversation_id=str(conv_id),
        text=text,
        timestamp=normalize_timestamp(raw.get("timestamp") or raw.get("createdAt")),
        is_sent=is_sent,
        content_type=_enum_or_default(
            ContentType, raw.get("contentType", "TEXT"), ContentType.TEXT
        ),
        status=_enum_or_default(
            MessageStatus, raw.get("status", "SENT"), MessageStatus.SENT
        ),
        image_url=_str_field(raw, "imageUrl", "Message"),
        voice_url=_str_field(raw, "voiceUrl", "Message"),
        duration=_str_field(raw, "duration", "Message"),
        message_type=_enum_or_default(
            MessageType, raw.get("type", "REGULAR"), MessageType.REGULAR
        ),
    )


def parse_conversation(raw: dict) -> Conversation:
    raw = _require_mapping(raw, "conversation")
    conversation_id = _str_field(raw, "id", "Conversation")
    if not conversation_id:
        raise ResponseFormatError("Conversation payload has no id")
    return Conversation(
        id=conversation_id,
        name=_str_field(raw, "name", "Conversation") or "",
        age=_int_field(raw, "age", "Conversation"),
        photo_url=_str_field(raw, "photoUrl", "Conversation") or "",
        last_message=_str_field(raw, "lastMessage", "Conversation") or "",
        timestamp=_str_field(raw, "timestamp", "Conversation") or "",
        unread_count=_int_field(raw, "unreadCount", "Conversation"),
        is_online=bool(raw.get("isOnline", False)),
        is_verified=bool(raw.get("isVerified", False)),
    )


def parse_profile(raw: dict) -> Profile:
    raw = _require_mapping(raw, "profile")
    profile_id = _str_field(raw, "id", "Profile")
    if not profile_id:
        raise ResponseFormatError("Profile payload has no id")
    prompts = [
        Prompt(question=p.get("question", ""), answer=p.get("answer", ""))
        for p in raw.get("prompts") or []
        if isinstance(p, dict)
    ]
    return Profile(
        id=profile_id,
        name=_str_field(raw, "name", "Profile") or "",
        age=_int_field(raw, "age", "Profile"),
        photos=_str_list(raw, "photos", "Profile"),
        profession=_str_field(raw, "profession", "Profile") or "",
        distance=_int_field(raw, "distance", "Profile"),
        is_verified=bool(raw.get("isVerified", False)),
        has_video=bool(raw.get("hasVideo", False)),
        prompts=prompts,
        video_url=_str_field(raw, "videoUrl", "Profile"),
        bio=_str_field(raw, "bio", "Profile"),
        height=_int_field(raw, "height", "Profile", default=None),
        education=_str_field(raw, "education", "Profile"),
        languages=_str_list(raw, "languages", "Profile"),
    )



def parse_like_response(raw: dict) -> LikeResponse:
    raw = _require_mapping(raw, "swipe result")
    match_profile = raw.get("matchProfile")
    return LikeResponse(
        is_match=bool(raw.get("isMatch", False)),
        conversation_id=_str_field(raw, "conversationId", "Swipe result"),
        match_profile=parse_profile(match_profile) if match_profile else None,
    )


def parse_otp_response(raw: dict) -> OtpResponse:
    raw = _require_mapping(raw, "OTP response")
    return OtpResponse(type=raw.get("type", ""), message=raw.get("message", ""))


def parse_auth_response(raw: dict) -> AuthResponse:
    raw = _require_mapping(raw, "auth response")
    token = raw.get("access_token")
    user = raw.get("user")
    if not token or not isinstance(user, dict) or not user.get("id"):
        raise ResponseFormatError("Auth response is missing access_token or user")
    return AuthResponse(
        access_token=token,
        user=UserInfo(
            id=str(user["id"]),
            name=user.get("name") or "",
            phone_number=user.get("phoneNumber") or "",
        ),
    )
