"""
Signature Verifiers - Decide whether a callback request is authentic.

Two strategies share one protocol:
- ManualSignatureVerifier rebuilds the signed string itself.
- DelegatedSignatureVerifier hands the check to the route URL layer.

Both give the same answer for the same inputs. Verification never raises:
any irregularity is an invalid signature.
"""

from typing import Protocol

from structlog import get_logger

from signed_callbacks.models.domain import (
    PROVIDER_PARAM,
    SIGNATURE_PARAM,
    CallbackRequest,
    SigningKeys,
)
from signed_callbacks.services.route_urls import RouteUrlGenerator
from signed_callbacks.services.signing import canonicalize, has_not_expired, matches_any_key

logger = get_logger(__name__)

# Never part of the signed payload: signature is what is being checked and
# provider is appended after signing.
IGNORED_QUERY = (SIGNATURE_PARAM, PROVIDER_PARAM)


class SignatureVerifier(Protocol):
    """
    Callback signature verifier protocol.

    Implementations must be pure: no shared mutable state, safe to call
    concurrently.
    """

    strategy: str

    def verify(self, request_url: str, query_string: str, signature: str) -> bool:
        """
        Check a callback request's signature.

        Args:
            request_url: Scheme, host and path of the request, no query
            query_string: Raw query string as received
            signature: Signature supplied with the request

        Returns:
            True only if the signature is authentic
        """
        ...

    def verify_request(self, request: CallbackRequest) -> bool:
        """Check a parsed callback request."""
        ...


class ManualSignatureVerifier:
    """Verifies by canonicalizing the query and recomputing the HMAC."""

    strategy = "manual"

    def __init__(self, keys: SigningKeys) -> None:
        self.keys = keys

    def verify(self, request_url: str, query_string: str, signature: str) -> bool:
        if not signature:
            logger.debug("callback_signature_missing", request_url=request_url)
            return False

        try:
            canonical = canonicalize(request_url, query_string, IGNORED_QUERY)
            fresh = has_not_expired(query_string)
            valid = matches_any_key(canonical, signature, self.keys.verification_keys)
            return valid and fresh
        except (AttributeError, TypeError, ValueError, UnicodeError) as exc:
            logger.warning(
                "callback_signature_unparseable",
                request_url=request_url,
                error=type(exc).__name__,
            )
            return False

    def verify_request(self, request: CallbackRequest) -> bool:
        return self.verify(request.request_url, request.query_string, request.signature)


class DelegatedSignatureVerifier:
    """
    Verifies through the route URL layer's own signature check.

    Compatibility mode for deployments whose callback URLs are validated by
    the route URL layer; that layer already ignores `signature`.
    """

    strategy = "delegated"

    def __init__(self, route_urls: RouteUrlGenerator) -> None:
        self.route_urls = route_urls

    def verify(self, request_url: str, query_string: str, signature: str) -> bool:
        if not signature:
            logger.debug("callback_signature_missing", request_url=request_url)
            return False

        try:
            return self.route_urls.has_valid_signature(
                request_url,
                query_string,
                signature,
                ignore_query=[name for name in IGNORED_QUERY if name != SIGNATURE_PARAM],
            )
        except (AttributeError, TypeError, ValueError, UnicodeError) as exc:
            logger.warning(
                "callback_signature_unparseable",
                request_url=request_url,
                error=type(exc).__name__,
            )
            return False

    def verify_request(self, request: CallbackRequest) -> bool:
        return self.verify(request.request_url, request.query_string, request.signature)


def build_signature_verifier(
    route_urls: RouteUrlGenerator,
    delegate: bool = False,
) -> SignatureVerifier:
    """
    Select the verification strategy.

    Args:
        route_urls: Route URL layer; its keys are shared by both strategies
        delegate: Use the route URL layer's check instead of the manual one
    """
    if delegate:
        return DelegatedSignatureVerifier(route_urls)
    return ManualSignatureVerifier(route_urls.keys)
