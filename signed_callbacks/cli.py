"""
Print the server-notification URL to register with a store platform.

Usage:
    # Signed URL for Google Play
    callback-url google_play

    # Unsigned URL, for display only
    callback-url app_store --unsigned

    # Signed URL valid for one day
    callback-url google_play --expires-in 86400
"""

import argparse
import sys
from datetime import timedelta

from signed_callbacks.config import settings
from signed_callbacks.exceptions import InvalidProviderError
from signed_callbacks.models.domain import ProviderId, SigningKeys
from signed_callbacks.observability.logging import setup_logging
from signed_callbacks.services.callback_urls import CallbackUrlGenerator
from signed_callbacks.services.route_urls import SERVER_NOTIFICATIONS_ROUTE, RouteUrlGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="callback-url",
        description="Generate the server-notification URL for a provider",
    )
    parser.add_argument("provider", help="Provider identifier, e.g. google_play or app_store")
    parser.add_argument(
        "--unsigned",
        action="store_true",
        help="Generate a URL without a signature (not accepted by the callback route)",
    )
    parser.add_argument(
        "--expires-in",
        type=int,
        default=None,
        metavar="SECONDS",
        help="Make the signed URL expire after SECONDS (default: CALLBACK_URL_TTL_SECONDS)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(stream=sys.stderr)

    ttl_seconds = settings.callback_url_ttl_seconds if args.expires_in is None else args.expires_in
    if ttl_seconds < 0:
        print("--expires-in cannot be negative", file=sys.stderr)
        return 2

    route_urls = RouteUrlGenerator(
        app_url=settings.app_url,
        keys=SigningKeys.from_strings(settings.app_key, settings.previous_key_list),
        routes={SERVER_NOTIFICATIONS_ROUTE: settings.notification_path},
    )
    generator = CallbackUrlGenerator(
        route_urls,
        ttl=timedelta(seconds=ttl_seconds) if ttl_seconds else None,
    )

    try:
        provider = ProviderId(args.provider).value
    except InvalidProviderError as exc:
        print(f"Invalid provider: {exc.reason}", file=sys.stderr)
        return 2

    url = generator.unsigned_url(provider) if args.unsigned else generator.generate(provider)

    print(url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
