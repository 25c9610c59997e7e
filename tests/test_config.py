"""Tests for client configuration."""

from pathlib import Path

from pranayam_client.config import ClientConfig, DEFAULT_API_URL


def test_defaults():
    config = ClientConfig()
    assert config.api_base_url == DEFAULT_API_URL
    assert config.database_path.name == "messages.db"


def test_base_url_gets_trailing_slash():
    config = ClientConfig(api_base_url="http://localhost:3000/api")
    assert config.api_base_url == "http://localhost:3000/api/"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("PRANAYAM_API_URL", "http://test.local/api/")
    monkeypatch.setenv("PRANAYAM_SOCKET_URL", "http://test.local")
    monkeypatch.setenv("PRANAYAM_TIMEOUT", "3.5")
    monkeypatch.setenv("PRANAYAM_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("PRANAYAM_DB_PATH", raising=False)
    monkeypatch.delenv("PRANAYAM_SESSION_PATH", raising=False)

    config = ClientConfig.from_env()
    assert config.api_base_url == "http://test.local/api/"
    assert config.socket_url == "http://test.local"
    assert config.timeout == 3.5
    assert config.database_path == tmp_path / "messages.db"
    assert config.session_path == tmp_path / "session.json"


def test_explicit_paths_override_data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("PRANAYAM_DB_PATH", str(tmp_path / "cache.sqlite"))
    config = ClientConfig.from_env()
    assert config.database_path == Path(tmp_path / "cache.sqlite")
