"""
Signing Primitives - Canonicalization and HMAC-SHA256 over callback URLs.

Shared by the route URL layer (which signs) and both verification strategies.
"""

import hashlib
import hmac
import time
from collections.abc import Iterable

from signed_callbacks.models.domain import EXPIRES_PARAM, query_value


def filter_query(query_string: str, ignore_query: Iterable[str]) -> str:
    """
    Remove ignored parameters from a raw query string.

    Tokens are matched on the text before their first `=` (case-sensitive) and
    kept verbatim otherwise, in the order received.
    """
    ignored = frozenset(ignore_query)
    return "&".join(
        token for token in query_string.split("&") if token.split("=", 1)[0] not in ignored
    )


def canonicalize(request_url: str, query_string: str, ignore_query: Iterable[str]) -> str:
    """
    Rebuild the string that was signed for a request.

    A request with nothing left after filtering canonicalizes to the bare
    request URL.
    """
    filtered = filter_query(query_string, ignore_query)
    return f"{request_url}?{filtered}".rstrip("?")


def sign(message: str, key: bytes) -> str:
    """Lowercase hex HMAC-SHA256 of message."""
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).hexdigest()


def signatures_match(expected: str, provided: str) -> bool:
    """Constant-time comparison; an empty provided signature never matches."""
    if not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def matches_any_key(canonical: str, provided: str, keys: Iterable[bytes]) -> bool:
    """True if provided is the signature of canonical under any of keys."""
    # Evaluate every key so timing does not reveal which one matched
    results = [signatures_match(sign(canonical, key), provided) for key in keys]
    return any(results)


def has_not_expired(query_string: str, now: float | None = None) -> bool:
    """
    False when the query carries an `expires` timestamp in the past.

    An unparseable timestamp counts as expired.
    """
    expires = query_value(query_string, EXPIRES_PARAM)
    if not expires:
        return True
    try:
        expires_at = int(expires)
    except ValueError:
        return False
    current = time.time() if now is None else now
    return current <= expires_at
