"""
Command-line bill lookup.

Usage:
    check_bill 5551234567
    python -m billproxy.check_bill 5551234567 --json

Reads PROVIDER_BASE_URL and PROVIDER_API_KEY from the environment (or .env),
calls the provider once and prints the bill.

Exit codes:
    0  bill printed
    1  provider error, network failure or unexpected error
    2  invalid configuration or usage
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import BillProxyError, InvalidPhoneError, ProviderError
from .logs import setup_logging
from .models import BillRecord
from .provider import create_sync_client, fetch_bill_sync, normalize_phone

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def format_bill(bill: BillRecord) -> str:
    """Render a bill as three lines of text"""
    last_payment = bill.last_payment if bill.last_payment is not None else "none"
    return "\n".join([
        f"Phone: {bill.phone}",
        f"Total due: {bill.total_due} (due {bill.due_date})",
        f"Last payment: {last_payment}",
    ])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="check_bill",
        description="Look up the current mobile bill for a phone number.",
    )
    parser.add_argument("phone", help="Phone number to look up")
    parser.add_argument("--json", action="store_true", help="Print the bill as JSON")
    parser.add_argument("--verbose", action="store_true", help="Log provider calls to stderr")
    return parser


def main(argv: Optional[List[str]] = None, client: Optional[httpx.Client] = None) -> int:
    """
    Run the CLI.

    Args:
        argv: Arguments, defaults to sys.argv[1:]
        client: Provider client; one is built from settings when omitted

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    try:
        phone = normalize_phone(args.phone)
    except InvalidPhoneError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_CONFIG

    own_client = client is None
    if own_client:
        try:
            settings = Settings()
        except ValidationError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return EXIT_CONFIG
        client = create_sync_client(settings)

    try:
        bill = fetch_bill_sync(client, phone)

    except ProviderError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.details is not None:
            print(json.dumps(e.details) if not isinstance(e.details, str) else e.details, file=sys.stderr)
        return EXIT_FAILURE

    except BillProxyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE

    except Exception as e:
        logger.error(f"Unexpected error in check_bill: {e}", exc_info=True)
        print(f"Error: {BillProxyError.message}", file=sys.stderr)
        return EXIT_FAILURE

    finally:
        if own_client:
            client.close()

    if args.json:
        print(bill.model_dump_json())
    else:
        print(format_bill(bill))

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
