"""
Command-line tools for Web Push.

Usage:
    # Generate a VAPID key pair (store the private key in VAPID_PRIVATE_KEY)
    pushcrypt generate-keys

    # Show the request that would be sent, without sending it
    pushcrypt request --subscription sub.json --message "Hello"

    # Encrypt and deliver
    pushcrypt send --subscription sub.json --message '{"title": "Hello"}'

sub.json is the browser's PushSubscription.toJSON():
    {"endpoint": "...", "keys": {"p256dh": "...", "auth": "..."}}

VAPID keys and subject come from the environment (VAPID_PRIVATE_KEY,
VAPID_PUBLIC_KEY, VAPID_SUBJECT) or a .env file.
"""
import argparse
import asyncio
import json
import logging
import sys

from pushcrypt.config import get_settings
from pushcrypt.engine import create_engine
from pushcrypt.errors import PushDeliveryError, WebPushError
from pushcrypt.request import ContentCoding
from pushcrypt.subscription import Subscription
from pushcrypt.transport import send_request
from pushcrypt.vapid import generate_vapid_keys


def _load_subscription(path: str) -> Subscription:
    with open(path, 'r', encoding='utf-8') as f:
        return Subscription.from_dict(json.load(f))


def _build_request(args):
    settings = get_settings()
    engine = create_engine(
        settings.get_vapid_keys(),
        args.subject or settings.vapid_subject,
        ContentCoding(args.coding or settings.content_coding),
        ttl=args.ttl if args.ttl is not None else settings.push_ttl,
    )
    subscription = _load_subscription(args.subscription)
    return engine.build_request(subscription, args.message.encode('utf-8'))


def cmd_generate_keys(args) -> int:
    private_key, public_key = generate_vapid_keys()
    print(json.dumps({"private_key": private_key, "public_key": public_key}))
    return 0


def cmd_request(args) -> int:
    request = _build_request(args)
    print(json.dumps(request.to_json(), indent=2))
    return 0


def cmd_send(args) -> int:
    request = _build_request(args)
    try:
        result = asyncio.run(send_request(request, settings=get_settings()))
    except PushDeliveryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not result.delivered:
        print(f"Subscription expired ({result.status_code})")
        return 2
    print(f"Delivered ({result.status_code})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pushcrypt",
        description="Encrypt and send Web Push messages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate-keys", help="Generate a VAPID key pair")
    generate.set_defaults(func=cmd_generate_keys)

    for name, func, help_text in (
        ("request", cmd_request, "Print the push request without sending it"),
        ("send", cmd_send, "Encrypt and deliver a push message"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--subscription", "-s",
            required=True,
            help="Path to the subscription JSON file"
        )
        sub.add_argument(
            "--message", "-m",
            default="",
            help="Payload text (empty sends a notification without data)"
        )
        sub.add_argument(
            "--coding",
            choices=[c.value for c in ContentCoding],
            help="Content-coding (default: CONTENT_CODING setting, aes128gcm)"
        )
        sub.add_argument(
            "--subject",
            help="VAPID subject, mailto: or https: (default: VAPID_SUBJECT setting)"
        )
        sub.add_argument(
            "--ttl",
            type=int,
            help="Message time-to-live in seconds (default: PUSH_TTL setting)"
        )
        sub.set_defaults(func=func)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else get_settings().log_level)

    try:
        return args.func(args)
    except (WebPushError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
