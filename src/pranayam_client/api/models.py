"""Data models for the REST API module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SwipeType(str, Enum):
    LIKE = "LIKE"
    PASS = "PASS"
    SUPERLIKE = "SUPERLIKE"


@dataclass
class Prompt:
    question: str
    answer: str


@dataclass
class Profile:
    """A discoverable user profile."""

    id: str
    name: str
    age: int
    photos: list[str] = field(default_factory=list)
    profession: str = ""
    distance: int = 0
    is_verified: bool = False
    has_video: bool = False
    prompts: list[Prompt] = field(default_factory=list)
    video_url: str | None = None
    bio: str | None = None
    height: int | None = None
    education: str | None = None
    languages: list[str] = field(default_factory=list)


@dataclass
class ProfileUpdate:
    """Partial profile update; ``None`` fields are left untouched server-side."""

    name: str | None = None
    dob: str | None = None
    gender: str | None = None
    interests: list[str] | None = None
    bio: str | None = None
    photo_url: str | None = None
    distance_preference: int | None = None
    gender_preference: list[str] | None = None

    def to_payload(self) -> dict:
        payload = {
            "name": self.name,
            "dob": self.dob,
            "gender": self.gender,
            "interests": self.interests,
            "bio": self.bio,
            "photoUrl": self.photo_url,
            "distancePreference": self.distance_preference,
            "genderPreference": self.gender_preference,
        }
        return {k: v for k, v in payload.items() if v is not None}


@dataclass
class LikeResponse:
    """Result of a swipe; ``is_match`` is decided by the server."""

    is_match: bool
    conversation_id: str | None = None
    match_profile: Profile | None = None


@dataclass
class OtpResponse:
    type: str
    message: str

    @property
    def is_sent(self) -> bool:
        """The backend reports a delivered OTP only with type "success"."""
        return self.type == "success"


@dataclass
class UserInfo:
    id: str
    name: str
    phone_number: str


# Placeholder name the backend gives accounts created by a first OTP login.
NEW_USER_NAME = "New User"


@dataclass
class AuthResponse:
    access_token: str
    user: UserInfo

    @property
    def needs_onboarding(self) -> bool:
        return self.user.name == NEW_USER_NAME
