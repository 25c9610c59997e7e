"""Phone/OTP sign-in state, independent of any UI."""

from __future__ import annotations

import logging
import re
from enum import Enum

from pranayam_client.api.client import PranayamAPI
from pranayam_client.exceptions import APIError, HTTPStatusError, ResponseFormatError

logger = logging.getLogger(__name__)

MAX_OTP_LENGTH = 6
DEFAULT_COUNTRY_CODE = "91"


def format_phone_number(phone: str) -> str:
    """Normalize user input to E.164-style ``+<digits>``.

    Non-digits are stripped. A number already starting with the Indian
    country code keeps it, a bare 10-digit number gets ``+91``, and anything
    else is just prefixed with ``+``.
    """
    cleaned = re.sub(r"[^0-9]", "", phone)
    if cleaned.startswith(DEFAULT_COUNTRY_CODE):
        return f"+{cleaned}"
    if len(cleaned) == 10:
        return f"+{DEFAULT_COUNTRY_CODE}{cleaned}"
    return f"+{cleaned}"


class LoginState(str, Enum):
    IDLE = "IDLE"
    OTP_SENT = "OTP_SENT"
    AUTHENTICATED = "AUTHENTICATED"
    ERROR = "ERROR"


class LoginFlow:
    """Drives the send-OTP / verify-OTP exchange and records its outcome.

    Failures never raise; they move the flow to ``LoginState.ERROR`` with a
    user-facing ``error`` message.

    Args:
        api: REST client. Its session store receives the token on success.
    """

    def __init__(self, api: PranayamAPI):
        self.api = api
        self.state = LoginState.IDLE
        self.phone_number = ""
        self.otp = ""
        self.error: str | None = None
        self.needs_onboarding = False

    def set_phone_number(self, value: str) -> None:
        self.phone_number = value

    def set_otp(self, value: str) -> None:
        """Accept the OTP draft only while it fits in six characters."""
        if len(value) <= MAX_OTP_LENGTH:
            self.otp = value

    def _fail(self, message: str) -> bool:
        self.state = LoginState.ERROR
        self.error = message
        return False

    def send_otp(self) -> bool:
        phone = format_phone_number(self.phone_number)
        try:
            response = self.api.send_otp(phone)
        except APIError as e:
            logger.warning(f"Sending OTP to {phone} failed: {e}")
            return self._fail(str(e) or "Network error")
        if not response.is_sent:
            return self._fail(response.message or "Failed to send OTP")
        self.state = LoginState.OTP_SENT
        self.error = None
        return True

    def verify_otp(self) -> bool:
        phone = format_phone_number(self.phone_number)
        try:
            auth = self.api.verify_otp(phone, self.otp)
        except HTTPStatusError:
            return self._fail("Invalid OTP")
        except ResponseFormatError:
            return self._fail("Invalid response")
        except APIError as e:
            logger.warning(f"Verifying OTP for {phone} failed: {e}")
            return self._fail(str(e) or "Network error")
        self.needs_onboarding = auth.needs_onboarding
        self.state = LoginState.AUTHENTICATED
        self.error = None
        return True

    def reset_to_phone_entry(self) -> None:
        self.state = LoginState.IDLE
        self.otp = ""

    def clear_error(self) -> None:
        self.error = None
        self.state = LoginState.OTP_SENT if self.otp else LoginState.IDLE

    def logout(self) -> None:
        if self.api.session is not None:
            self.api.session.logout()
        self.state = LoginState.IDLE
        self.phone_number = ""
        self.otp = ""
        self.error = None
        self.needs_onboarding = False
