"""Profile discovery and swiping."""

from pranayam_client.discovery.deck import DiscoveryDeck

__all__ = ["DiscoveryDeck"]
