"""
Hypothesis Property-Based Tests for callback signatures.

Uses Hypothesis to generate providers, keys, parameters and query strings and
verify:
- Generated URLs always verify (round-trip)
- Tampering with any signed value fails verification
- The provider parameter never affects the outcome
- Both strategies agree on arbitrary input and never raise
"""

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from signed_callbacks.models.domain import CallbackRequest, CallbackUrl, SigningKeys
from signed_callbacks.services.callback_urls import CallbackUrlGenerator
from signed_callbacks.services.route_urls import SERVER_NOTIFICATIONS_ROUTE, RouteUrlGenerator
from signed_callbacks.services.signature_verifier import (
    DelegatedSignatureVerifier,
    ManualSignatureVerifier,
)

# ============================================================================
# Hypothesis Strategies - Reusable data generators
# ============================================================================

providers = st.text(max_size=200)

keys = st.binary(min_size=1, max_size=64)

param_names = st.text(
    alphabet=st.characters(whitelist_categories=("Ll", "Lu", "Nd")), min_size=1, max_size=12
).filter(lambda name: name not in ("signature", "provider", "expires"))

params = st.dictionaries(param_names, st.text(max_size=20), max_size=5)

hosts = st.sampled_from(["https://app.test", "https://billing.example.com", "http://localhost:8000"])


def _generator(host: str, key: bytes) -> RouteUrlGenerator:
    return RouteUrlGenerator(
        app_url=host,
        keys=SigningKeys(current=key),
        routes={SERVER_NOTIFICATIONS_ROUTE: "/v1/notifications/server"},
    )


class TestRoundTripProperties:
    """Generated URLs verify under the key that signed them."""

    @given(provider=providers, key=keys, host=hosts)
    @settings(max_examples=100)
    def test_signed_url_always_verifies(self, provider, key, host):
        route_urls = _generator(host, key)
        url = CallbackUrlGenerator(route_urls).signed_url(provider)
        request = CallbackRequest.from_url(url)

        assert ManualSignatureVerifier(route_urls.keys).verify_request(request)
        assert DelegatedSignatureVerifier(route_urls).verify_request(request)

    @given(parameters=params, provider=providers, key=keys)
    @settings(max_examples=100)
    def test_signed_route_with_parameters_verifies(self, parameters, provider, key):
        route_urls = _generator("https://app.test", key)
        signed = route_urls.signed_route(SERVER_NOTIFICATIONS_ROUTE, parameters)
        url = str(CallbackUrl.parse(signed).with_param("provider", provider))

        assert ManualSignatureVerifier(route_urls.keys).verify_request(
            CallbackRequest.from_url(url)
        )


class TestTamperProperties:
    """Changing a signed value invalidates the URL."""

    @given(
        parameters=params.filter(bool),
        replacement=st.text(min_size=1, max_size=20),
        key=keys,
    )
    @settings(max_examples=100)
    def test_changed_value_fails(self, parameters, replacement, key):
        name = sorted(parameters)[0]
        assume(parameters[name] != replacement)

        route_urls = _generator("https://app.test", key)
        original = route_urls.signed_route(SERVER_NOTIFICATIONS_ROUTE, parameters)
        signature = CallbackRequest.from_url(original).signature

        tampered = dict(parameters, **{name: replacement})
        forged = route_urls.route(SERVER_NOTIFICATIONS_ROUTE, dict(sorted(tampered.items())))
        request = CallbackRequest.from_url(f"{forged}&signature={signature}")

        assert not ManualSignatureVerifier(route_urls.keys).verify_request(request)
        assert not DelegatedSignatureVerifier(route_urls).verify_request(request)

    @given(key=keys, other=keys)
    @settings(max_examples=50)
    def test_other_key_fails(self, key, other):
        assume(key != other)
        url = CallbackUrlGenerator(_generator("https://app.test", key)).signed_url("google_play")
        verifier = ManualSignatureVerifier(SigningKeys(current=other))
        assert not verifier.verify_request(CallbackRequest.from_url(url))


class TestProviderIrrelevanceProperties:
    """The provider parameter is outside the signed payload."""

    @given(original=providers, replacement=providers, key=keys)
    @settings(max_examples=100)
    def test_swapping_provider_keeps_validity(self, original, replacement, key):
        route_urls = _generator("https://app.test", key)
        generator = CallbackUrlGenerator(route_urls)
        signed = CallbackRequest.from_url(generator.signed_url(original))
        swapped = CallbackRequest.from_url(generator.signed_url(replacement))

        verifier = ManualSignatureVerifier(route_urls.keys)
        assert verifier.verify_request(signed) == verifier.verify_request(swapped) is True


class TestStrategyAgreement:
    """Manual and delegated strategies agree and never raise."""

    @given(query=st.text(max_size=80), signature=st.text(max_size=70), key=keys)
    @settings(max_examples=200)
    def test_arbitrary_input(self, query, signature, key):
        route_urls = _generator("https://app.test", key)
        url = "https://app.test/v1/notifications/server"

        manual = ManualSignatureVerifier(route_urls.keys).verify(url, query, signature)
        delegated = DelegatedSignatureVerifier(route_urls).verify(url, query, signature)

        assert manual == delegated
        assert manual is False
