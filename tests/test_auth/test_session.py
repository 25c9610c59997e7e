"""Tests for session persistence."""

import pytest

from pranayam_client.auth.session import SessionStore
from pranayam_client.exceptions import AuthError


@pytest.fixture
def session(tmp_path):
    return SessionStore(tmp_path / "nested" / "session.json")


def test_empty_session(session):
    assert session.get_auth_token() is None
    assert session.get_user_id() is None
    assert session.is_logged_in() is False
    assert session.is_onboarding_complete() is False


def test_save_and_read_back(session):
    session.save_auth_token("tok-123")
    session.save_user_id("user-1")
    session.save_onboarding_complete(True)

    reloaded = SessionStore(session.path)
    assert reloaded.get_auth_token() == "tok-123"
    assert reloaded.get_user_id() == "user-1"
    assert reloaded.is_onboarding_complete() is True
    assert reloaded.is_logged_in() is True


def test_file_is_owner_only(session):
    session.save_auth_token("tok")
    assert session.path.stat().st_mode & 0o777 == 0o600


def test_logout_clears_everything(session):
    session.save_auth_token("tok")
    session.save_onboarding_complete(True)
    session.logout()
    assert session.is_logged_in() is False
    assert session.is_onboarding_complete() is False


def test_corrupt_file_reads_as_empty(session):
    session.path.parent.mkdir(parents=True)
    session.path.write_text("{not json")
    assert session.get_auth_token() is None


def test_require_user_id(session):
    with pytest.raises(AuthError, match="No signed-in user"):
        session.require_user_id()
    session.save_user_id("user-9")
    assert session.require_user_id() == "user-9"
