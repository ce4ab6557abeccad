"""Issuer key pair and record signatures.

The issuer holds one RSA key pair for the lifetime of the process. It is
loaded (or generated on first start) into a SigningContext, which is then
passed explicitly to everything that signs or verifies.

Signatures are RSA PKCS#1 v1.5 over SHA-256 of the canonical payload
``<id>|<original_name>|<upload_time>``, base64-encoded. This matches
``openssl dgst -sha256 -verify public.pem``, so certificates can be checked
without this software.

Example:
    context = load_or_create_signing_context(Path("keys"))
    signature = sign_record(context, record)
    assert verify_signature(context, canonical_payload(record), signature)
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
    load_pem_public_key,
)

from wipecert.core.errors import KeyUnavailableError

if TYPE_CHECKING:
    from wipecert.services.records import SubmissionRecord

logger = logging.getLogger(__name__)

PAYLOAD_DELIMITER = "|"
PRIVATE_KEY_FILE = "private.pem"
PUBLIC_KEY_FILE = "public.pem"
DEFAULT_KEY_SIZE = 2048
SIGNATURE_ALGORITHM = "RSA-PKCS1v15-SHA256"


@dataclass(frozen=True)
class SigningContext:
    """Both halves of the issuer key pair.

    Attributes:
        private_key: RSA private key, or None for a verify-only context.
        public_key: RSA public key.
        public_key_pem: PEM (SubjectPublicKeyInfo) text of the public key,
            embedded in certificates for offline verification.
    """

    private_key: rsa.RSAPrivateKey | None
    public_key: rsa.RSAPublicKey
    public_key_pem: str

    @property
    def can_sign(self) -> bool:
        return self.private_key is not None

    @property
    def key_size(self) -> int:
        return self.public_key.key_size

    @classmethod
    def from_private_key(cls, private_key: rsa.RSAPrivateKey) -> SigningContext:
        """Build a context from a private key, deriving the public half."""
        public_key = private_key.public_key()
        return cls(
            private_key=private_key,
            public_key=public_key,
            public_key_pem=_public_pem(public_key),
        )

    @classmethod
    def verify_only(cls, public_key_pem: str | bytes) -> SigningContext:
        """Build a context that can only verify signatures.

        Raises:
            KeyUnavailableError: If the PEM is not an RSA public key.
        """
        pem = public_key_pem.encode("utf-8") if isinstance(public_key_pem, str) else public_key_pem
        try:
            public_key = load_pem_public_key(pem)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyUnavailableError(f"Unreadable public key: {e}") from e
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise KeyUnavailableError("Public key is not an RSA key")
        return cls(private_key=None, public_key=public_key, public_key_pem=_public_pem(public_key))


def _public_pem(public_key: rsa.RSAPublicKey) -> str:
    return public_key.public_bytes(
        encoding=Encoding.PEM,
        format=PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")


def load_or_create_signing_context(
    key_dir: Path,
    *,
    key_size: int = DEFAULT_KEY_SIZE,
) -> SigningContext:
    """Load the issuer key pair, generating it when absent.

    A new pair is generated only when neither key file exists. A lone
    public or private file means key material was lost, and is refused
    rather than silently replaced.

    Args:
        key_dir: Directory holding private.pem and public.pem.
        key_size: RSA modulus size for newly generated keys.

    Returns:
        SigningContext holding both key halves.

    Raises:
        KeyUnavailableError: If the key files are incomplete or unreadable.
    """
    private_file = key_dir / PRIVATE_KEY_FILE
    public_file = key_dir / PUBLIC_KEY_FILE

    if private_file.exists() and public_file.exists():
        logger.info("Loading issuer key pair from %s", key_dir)
        return _load_key_pair(private_file, public_file)

    if private_file.exists() or public_file.exists():
        raise KeyUnavailableError(
            f"Incomplete key pair in {key_dir}: both {PRIVATE_KEY_FILE} and "
            f"{PUBLIC_KEY_FILE} are required"
        )

    logger.info("Generating RSA-%d issuer key pair in %s", key_size, key_dir)
    return _generate_key_pair(private_file, public_file, key_size)


def _load_key_pair(private_file: Path, public_file: Path) -> SigningContext:
    try:
        private_key = load_pem_private_key(private_file.read_bytes(), password=None)
        public_key = load_pem_public_key(public_file.read_bytes())
    except (OSError, ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyUnavailableError(f"Unreadable issuer key pair: {e}") from e

    if not isinstance(private_key, rsa.RSAPrivateKey) or not isinstance(
        public_key, rsa.RSAPublicKey
    ):
        raise KeyUnavailableError("Issuer key pair is not an RSA key pair")

    if private_key.public_key().public_numbers() != public_key.public_numbers():
        raise KeyUnavailableError("public.pem does not match private.pem")

    return SigningContext.from_private_key(private_key)


def _generate_key_pair(private_file: Path, public_file: Path, key_size: int) -> SigningContext:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    context = SigningContext.from_private_key(private_key)

    key_pem = private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=NoEncryption(),
    )
    try:
        private_file.parent.mkdir(parents=True, exist_ok=True)
        private_file.write_bytes(key_pem)
        private_file.chmod(0o600)
        public_file.write_text(context.public_key_pem, encoding="utf-8")
    except OSError as e:
        raise KeyUnavailableError(f"Could not write issuer key pair: {e}") from e

    return context


def build_payload(record_id: str, original_name: str, upload_time: str) -> bytes:
    """``<id>|<original_name>|<upload_time>`` as UTF-8."""
    return PAYLOAD_DELIMITER.join((record_id, original_name, upload_time)).encode("utf-8")


def canonical_payload(record: SubmissionRecord) -> bytes:
    """Bytes covered by a record's signature."""
    return build_payload(record.id, record.original_name, record.upload_time)


def sign_payload(context: SigningContext, payload: bytes) -> str:
    """Sign a payload and return the base64 signature.

    Raises:
        KeyUnavailableError: If the context holds no usable private key.
    """
    if context.private_key is None:
        raise KeyUnavailableError("Signing key is not loaded")

    try:
        signature = context.private_key.sign(payload, padding.PKCS1v15(), hashes.SHA256())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.error("Signing failed: %s", e)
        raise KeyUnavailableError(f"Signing key is unusable: {e}") from e

    return base64.b64encode(signature).decode("ascii")


def sign_record(context: SigningContext, record: SubmissionRecord) -> str:
    """Sign the canonical payload of a record."""
    return sign_payload(context, canonical_payload(record))


def verify_signature(context: SigningContext, payload: bytes, signature_b64: str) -> bool:
    """Check a base64 signature over a payload.

    Returns:
        True if the signature matches, False for any mismatch or malformed
        signature.
    """
    try:
        signature = base64.b64decode(signature_b64, validate=True)
    except (binascii.Error, ValueError):
        logger.debug("Signature is not valid base64")
        return False

    try:
        context.public_key.verify(signature, payload, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False

    return True
