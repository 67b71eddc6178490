from __future__ import annotations

import hashlib
import hmac
import secrets

SECRET_BYTES = 32


class Fingerprinter:
    """Keyed digest of values for one engine session.

    The secret is drawn once when the fingerprinter is created and is never
    exposed, so fingerprints are only comparable within the same session.
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: bytes | None = None) -> None:
        if secret is None:
            secret = secrets.token_bytes(SECRET_BYTES)
        self._secret = secret

    def __repr__(self) -> str:
        return "Fingerprinter(<secret>)"

    def fingerprint(self, value: str) -> str:
        """Return the hex HMAC-SHA256 of ``value``."""
        return hmac.new(self._secret, value.encode("utf-8"), hashlib.sha256).hexdigest()
