"""Swipe deck over the server's discovery recommendations."""

from __future__ import annotations

import logging

from pranayam_client.api.client import DEFAULT_MAX_DISTANCE_KM, PranayamAPI
from pranayam_client.api.models import LikeResponse, Profile, SwipeType
from pranayam_client.exceptions import APIError
from pranayam_client.realtime.broadcast import Broadcaster

logger = logging.getLogger(__name__)


class DiscoveryDeck:
    """Card stack with a cursor; swiping always advances, even if the call fails.

    Mutual likes are published on ``matches`` as ``{"match": LikeResponse}``.

    Args:
        api: REST client.
        user_id: Signed-in user doing the swiping.
    """

    def __init__(self, api: PranayamAPI, user_id: str):
        self.api = api
        self.user_id = user_id
        self.profiles: list[Profile] = []
        self.current_index = 0
        self.error: str | None = None
        self.matches = Broadcaster("match")

    def load(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
        max_distance: int = DEFAULT_MAX_DISTANCE_KM,
    ) -> bool:
        """Fetch a fresh deck and rewind to its first card.

        On failure the current deck is kept and ``error`` is set.
        """
        try:
            profiles = self.api.get_discovery_profiles(
                self.user_id, latitude, longitude, max_distance=max_distance
            )
        except APIError as e:
            logger.warning(f"Loading discovery profiles failed: {e}")
            self.error = str(e)
            return False
        self.profiles = profiles
        self.current_index = 0
        self.error = None
        return True

    @property
    def current(self) -> Profile | None:
        if 0 <= self.current_index < len(self.profiles):
            return self.profiles[self.current_index]
        return None

    @property
    def remaining(self) -> int:
        return max(0, len(self.profiles) - self.current_index)

    def like(self) -> LikeResponse | None:
        return self._swipe(SwipeType.LIKE)

    def superlike(self) -> LikeResponse | None:
        return self._swipe(SwipeType.SUPERLIKE)

    def pass_profile(self) -> LikeResponse | None:
        return self._swipe(SwipeType.PASS)

    def _swipe(self, swipe_type: SwipeType) -> LikeResponse | None:
        profile = self.current
        if profile is None:
            return None
        try:
            response = self.api.swipe_profile(self.user_id, profile.id, swipe_type)
        except APIError as e:
            logger.warning(f"{swipe_type.value} on {profile.id} failed: {e}")
            response = None
        self.current_index += 1

        if response is not None and response.is_match and swipe_type != SwipeType.PASS:
            logger.info(f"Matched with {profile.id}")
            self.matches.publish({"match": response})
        return response

    def undo(self) -> bool:
        """Step back one card; a no-op on the first card."""
        if self.current_index > 0:
            self.current_index -= 1
            return True
        return False
