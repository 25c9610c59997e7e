"""Client configuration, read from the environment with sane defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_API_URL = "https://api.pranayam.app/"
DEFAULT_SOCKET_URL = "https://api.pranayam.app"
DEFAULT_DATA_DIR = Path.home() / ".pranayam"


@dataclass
class ClientConfig:
    """Connection and storage settings shared by the API, socket and store.

    Args:
        api_base_url: Base URL of the REST API (trailing slash optional).
        socket_url: URL of the real-time Socket.IO endpoint.
        timeout: HTTP timeout in seconds.
        database_path: SQLite file for the local message cache.
        session_path: JSON file holding the auth token and user id.
    """

    api_base_url: str = DEFAULT_API_URL
    socket_url: str = DEFAULT_SOCKET_URL
    timeout: float = 15.0
    database_path: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "messages.db")
    session_path: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "session.json")

    def __post_init__(self) -> None:
        if not self.api_base_url.endswith("/"):
            self.api_base_url += "/"
        self.database_path = Path(self.database_path)
        self.session_path = Path(self.session_path)

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a config from ``PRANAYAM_*`` environment variables."""
        data_dir = Path(os.environ.get("PRANAYAM_DATA_DIR", str(DEFAULT_DATA_DIR)))
        return cls(
            api_base_url=os.environ.get("PRANAYAM_API_URL", DEFAULT_API_URL),
            socket_url=os.environ.get("PRANAYAM_SOCKET_URL", DEFAULT_SOCKET_URL),
            timeout=float(os.environ.get("PRANAYAM_TIMEOUT", "15")),
            database_path=Path(
                os.environ.get("PRANAYAM_DB_PATH", str(data_dir / "messages.db"))
            ),
            session_path=Path(
                os.environ.get("PRANAYAM_SESSION_PATH", str(data_dir / "session.json"))
            ),
        )
