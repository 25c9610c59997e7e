"""Pranayam REST API access."""

from pranayam_client.api.client import PranayamAPI
from pranayam_client.api.models import (
    AuthResponse,
    LikeResponse,
    OtpResponse,
    Profile,
    ProfileUpdate,
    Prompt,
    SwipeType,
    UserInfo,
)

__all__ = [
    "PranayamAPI",
    "AuthResponse",
    "LikeResponse",
    "OtpResponse",
    "Profile",
    "ProfileUpdate",
    "Prompt",
    "SwipeType",
    "UserInfo",
]
