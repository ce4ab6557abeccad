"""Offline certificate verification.

Checks a certificate signature using only the values printed on the
certificate and the issuer public key, without contacting the service.

Usage:
    wipecert-verify --id <id> --name <original filename> \\
        --time <upload time> --signature <base64> --public-key public.pem

Exit codes:
    0  signature valid
    1  signature invalid
    2  public key missing or unreadable
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from wipecert.core.errors import KeyUnavailableError
from wipecert.services.signing import SigningContext, build_payload, verify_signature

logger = logging.getLogger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_KEY_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wipecert-verify",
        description="Verify a wipe certificate signature offline.",
    )
    parser.add_argument("--id", required=True, dest="record_id", help="Certificate ID")
    parser.add_argument("--name", required=True, help="Original filename as printed")
    parser.add_argument("--time", required=True, help="Upload time as printed")
    parser.add_argument(
        "--signature",
        required=True,
        help="Base64 signature (line breaks and spaces are ignored)",
    )
    parser.add_argument(
        "--public-key",
        required=True,
        type=Path,
        help="Issuer public key PEM file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the verifier and return the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        pem = args.public_key.read_bytes()
        context = SigningContext.verify_only(pem)
    except OSError as e:
        print(f"Cannot read public key {args.public_key}: {e}", file=sys.stderr)
        return EXIT_KEY_ERROR
    except KeyUnavailableError as e:
        print(f"Invalid public key {args.public_key}: {e.message}", file=sys.stderr)
        return EXIT_KEY_ERROR

    # Certificates wrap the signature over several lines
    signature = "".join(args.signature.split())
    payload = build_payload(args.record_id, args.name, args.time)

    if verify_signature(context, payload, signature):
        print(f"Signature valid for certificate {args.record_id}")
        return EXIT_VALID

    print(f"Signature INVALID for certificate {args.record_id}")
    return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
