"""
Domain Models - Transient value types for callback URLs.

NO DICTIONARIES - All data structures are strongly typed immutable dataclasses.
"""

from dataclasses import dataclass, field
from urllib.parse import parse_qsl, quote

from signed_callbacks.exceptions import InvalidProviderError

PROVIDER_PARAM = "provider"
SIGNATURE_PARAM = "signature"
EXPIRES_PARAM = "expires"


@dataclass(frozen=True)
class ProviderId:
    """
    Identifier of the platform calling back, e.g. "google_play".

    Checked where provider ids enter the service (the URL endpoint and the
    CLI). The URL generator itself accepts any string.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate provider identifier."""
        if not self.value:
            raise InvalidProviderError(self.value, "provider cannot be empty")
        if len(self.value) > 64:
            raise InvalidProviderError(self.value, "provider longer than 64 characters")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SigningKeys:
    """
    Secret keys used to sign and verify callback URLs.

    The current key signs; the current and previous keys verify. Keys are
    excluded from repr so they never reach logs.
    """

    current: bytes = field(repr=False)
    previous: tuple[bytes, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        """Validate key material."""
        if not self.current:
            raise ValueError("Signing key cannot be empty")
        if any(not key for key in self.previous):
            raise ValueError("Previous signing keys cannot be empty")

    @classmethod
    def from_strings(cls, current: str, previous: list[str] | None = None) -> "SigningKeys":
        """Build keys from configuration strings."""
        return cls(
            current=current.encode("utf-8"),
            previous=tuple(key.encode("utf-8") for key in previous or []),
        )

    @property
    def verification_keys(self) -> tuple[bytes, ...]:
        """All keys a signature may have been produced with, newest first."""
        return (self.current, *self.previous)


@dataclass(frozen=True)
class CallbackUrl:
    """
    Structured URL with an ordered query string.

    Renders `?` before the first parameter and `&` before the rest, so callers
    never place separators by hand. Each query token is kept verbatim; tokens
    added through `with_param` are percent-encoded.
    """

    base: str
    query: tuple[str, ...] = ()

    @classmethod
    def parse(cls, url: str) -> "CallbackUrl":
        """Split an absolute or relative URL into base and raw query tokens."""
        base, _, query = url.partition("?")
        base = base.split("#", 1)[0]
        query = query.split("#", 1)[0]
        return cls(base=base, query=tuple(query.split("&")) if query else ())

    def with_param(self, name: str, value: str) -> "CallbackUrl":
        """Return a copy with `name=value` appended after existing parameters."""
        token = f"{quote(name, safe='')}={quote(value, safe='')}"
        return CallbackUrl(base=self.base, query=(*self.query, token))

    @property
    def query_string(self) -> str:
        return "&".join(self.query)

    def __str__(self) -> str:
        if not self.query:
            return self.base
        return f"{self.base}?{self.query_string}"


@dataclass(frozen=True)
class CallbackRequest:
    """
    What the verifier needs from an incoming callback.

    request_url is scheme, host and path with no query; query_string is the
    raw query exactly as received.
    """

    request_url: str
    query_string: str
    signature: str

    @classmethod
    def from_url(cls, url: str) -> "CallbackRequest":
        """Extract request URL, raw query and signature from a full URL."""
        parsed = CallbackUrl.parse(url)
        return cls(
            request_url=normalize_request_url(parsed.base),
            query_string=parsed.query_string,
            signature=query_value(parsed.query_string, SIGNATURE_PARAM),
        )

    @property
    def provider(self) -> str | None:
        return query_value(self.query_string, PROVIDER_PARAM) or None


def normalize_request_url(url: str) -> str:
    """Drop a trailing slash so `https://host/` and `https://host` sign alike."""
    return url.rstrip("/")


def query_value(query_string: str, name: str) -> str:
    """
    Decoded value of a query parameter, last occurrence winning.

    Returns an empty string when the parameter is absent.
    """
    value = ""
    for key, item in parse_qsl(query_string, keep_blank_values=True):
        if key == name:
            value = item
    return value
