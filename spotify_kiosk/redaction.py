"""Secret redaction for anything that ends up in a log line."""

import re

REDACTED = "***REDACTED***"

# Query/form keys whose values are Spotify secrets
SENSITIVE_KEYS = ("refresh_token", "access_token", "client_secret", "code", "token", "secret")

_KEY_VALUE = re.compile(rf"\b({'|'.join(SENSITIVE_KEYS)})=([^&\s\"]+)", re.IGNORECASE)
_BEARER = re.compile(r"\b(Bearer|Basic)\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE)


def redact_sensitive_data(text: str) -> str:
    """Mask secret query parameters and Authorization credentials in a URL or header string."""
    text = _KEY_VALUE.sub(rf"\1={REDACTED}", text)
    return _BEARER.sub(rf"\1 {REDACTED}", text)
