"""Tests for the top-level client wiring."""

import httpx
import pytest

from pranayam_client.client import PranayamClient
from pranayam_client.config import ClientConfig
from pranayam_client.exceptions import AuthError


@pytest.fixture
def client(tmp_path):
    config = ClientConfig(
        api_base_url="https://api.test/",
        database_path=tmp_path / "messages.db",
        session_path=tmp_path / "session.json",
    )
    c = PranayamClient(config, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))
    yield c
    c.close()


def test_open_chat_requires_login(client):
    with pytest.raises(AuthError):
        client.open_chat("c1")


def test_open_chat_uses_session_user(client):
    client.session.save_user_id("u1")
    chat = client.open_chat("c1", counterpart_id="u2")
    assert chat.user_id == "u1"
    assert chat.sync.current_user_id == "u1"
    assert chat.socket.url == client.config.socket_url


def test_store_is_shared(client):
    assert client.store is client.store
    assert client.chat_sync().store is client.store


def test_logout_removes_cache(client):
    client.session.save_auth_token("tok")
    client.store.get_messages("c1")
    assert client.config.database_path.exists()
    client.logout()
    assert not client.config.database_path.exists()
    assert not client.session.is_logged_in()


def test_discovery_deck_requires_login(client):
    with pytest.raises(AuthError):
        client.discovery_deck()


def test_discovery_deck_and_login_share_api(client):
    client.session.save_user_id("u1")
    deck = client.discovery_deck()
    assert deck.user_id == "u1"
    assert deck.api is client.api
    assert client.login_flow().api is client.api
