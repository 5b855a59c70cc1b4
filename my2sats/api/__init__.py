"""my2sats HTTP API: NIP-98 request authentication and the posts client."""

from my2sats.api.auth import AuthProof, authenticate, decode_token, verify_proof
from my2sats.api.client import My2SatsClient

__all__ = ["AuthProof", "My2SatsClient", "authenticate", "decode_token", "verify_proof"]
