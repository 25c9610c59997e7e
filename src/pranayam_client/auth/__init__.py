"""Login session persistence and the phone/OTP sign-in flow.

The sign-in flow depends on the API client; import it explicitly or let the
lazy attribute lookup below do it:
    from pranayam_client.auth.login import LoginFlow, format_phone_number
"""

from pranayam_client.auth.session import SessionStore


def __getattr__(name):
    """Lazy imports for names that pull in the API client."""
    if name in ("LoginFlow", "LoginState", "format_phone_number"):
        from pranayam_client.auth import login
        return getattr(login, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["SessionStore", "LoginFlow", "LoginState", "format_phone_number"]
