import base64
import secrets
from dataclasses import dataclass

# 64 random bytes, same as the token size used for the Set-Cookie value
IDENTIFIER_BYTES = 64


@dataclass(frozen=True, order=True)
class SessionIdentifier:
    """Opaque token naming a session. Used as the cookie value and the storage key."""

    value: str

    def __str__(self) -> str:
        return self.value


def random_identifier() -> SessionIdentifier:
    """Mint a new cookie-safe identifier from the OS random source."""
    raw = secrets.token_bytes(IDENTIFIER_BYTES)
    token = base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
    return SessionIdentifier(token)
