"""my2sats: publish posts to a my2sats site using Nostr authentication."""

__version__ = "1.0.0"
