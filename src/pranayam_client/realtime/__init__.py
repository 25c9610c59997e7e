"""Real-time chat channel (requires python-socketio)."""

from pranayam_client.realtime.broadcast import Broadcaster
from pranayam_client.realtime.socket import ChatSocket

__all__ = ["Broadcaster", "ChatSocket"]
