"""Ed25519 signing and did:key encoding."""

import base64
import logging
import secrets
from typing import NamedTuple, Optional

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from .errors import InvalidFormatError, InvalidKeyLengthError
from .models import VerificationOutcome

logger = logging.getLogger(__name__)

DID_KEY_PREFIX = "did:key:"
# Multibase prefix "z" = base58btc
DID_KEY_MULTIBASE_PREFIX = "did:key:z"
# Multicodec prefix for ed25519-pub
ED25519_MULTICODEC_PREFIX = b"\xed\x01"

PRIVATE_KEY_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


class DidKeyPair(NamedTuple):
    """A freshly generated did:key identity."""

    did: str
    private_key_hex: str
    public_key_hex: str


def _hex_to_bytes(value: str, what: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise InvalidFormatError(f"{what} is not valid hex: {e}") from e


def private_key_from_hex(private_key_hex: str) -> ed25519.Ed25519PrivateKey:
    """Load an Ed25519 private key from its 32-byte hex seed.

    Raises:
        InvalidFormatError: If the key is not hex
        InvalidKeyLengthError: If the key does not decode to 32 bytes
    """
    key_bytes = _hex_to_bytes(private_key_hex, "Private key")
    if len(key_bytes) != PRIVATE_KEY_LENGTH:
        raise InvalidKeyLengthError(
            f"Invalid private key length. Expected {PRIVATE_KEY_LENGTH} bytes, "
            f"got {len(key_bytes)}."
        )
    return ed25519.Ed25519PrivateKey.from_private_bytes(key_bytes)


def public_key_bytes(private_key: ed25519.Ed25519PrivateKey) -> bytes:
    """Raw 32-byte public key for a private key."""
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
    )


def public_key_from_private(private_key_hex: str) -> str:
    """Derive the hex public key from a hex private key."""
    return public_key_bytes(private_key_from_hex(private_key_hex)).hex()


def sign_message(message: str, private_key_hex: str) -> str:
    """Sign a message with an Ed25519 private key.

    Args:
        message: Message to sign (UTF-8 encoded before signing)
        private_key_hex: 32-byte private key seed in hex

    Returns:
        Signature in hex (64 bytes)
    """
    private_key = private_key_from_hex(private_key_hex)
    return private_key.sign(message.encode("utf-8")).hex()


def check_signature(
    message: str, signature_hex: str, public_key_hex: str
) -> VerificationOutcome:
    """Verify a signature and report why it failed, if it did."""
    try:
        signature = bytes.fromhex(signature_hex)
        public_key = ed25519.Ed25519PublicKey.from_public_bytes(
            bytes.fromhex(public_key_hex)
        )
    except ValueError as e:
        logger.warning("Ed25519 verification input is malformed: %s", e)
        return VerificationOutcome.MALFORMED

    if len(signature) != SIGNATURE_LENGTH:
        logger.warning(
            "Ed25519 signature has %d bytes, expected %d",
            len(signature),
            SIGNATURE_LENGTH,
        )
        return VerificationOutcome.MALFORMED

    try:
        public_key.verify(signature, message.encode("utf-8"))
    except InvalidSignature:
        logger.info("Ed25519 signature does not match public key")
        return VerificationOutcome.MISMATCH
    return VerificationOutcome.VALID


def verify_signature(message: str, signature_hex: str, public_key_hex: str) -> bool:
    """Verify an Ed25519 signature.

    Args:
        message: Original message
        signature_hex: Signature in hex
        public_key_hex: Public key in hex (32 bytes)

    Returns:
        True if the signature is valid, False otherwise (including malformed input)
    """
    return check_signature(message, signature_hex, public_key_hex) is (
        VerificationOutcome.VALID
    )


def key_to_did(public_key: bytes) -> str:
    """Encode a raw Ed25519 public key as a did:key DID.

    Raises:
        InvalidKeyLengthError: If the key is not 32 bytes
    """
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise InvalidKeyLengthError(
            f"Invalid public key length. Expected {PUBLIC_KEY_LENGTH} bytes, "
            f"got {len(public_key)}."
        )
    encoded = base58.b58encode(ED25519_MULTICODEC_PREFIX + public_key).decode("ascii")
    return f"{DID_KEY_MULTIBASE_PREFIX}{encoded}"


def did_to_multibase(did: str) -> str:
    """Strip the ``did:key:z`` prefix and return the base58btc payload.

    Raises:
        InvalidFormatError: If the DID is not a base58btc did:key
    """
    if not did.startswith(DID_KEY_MULTIBASE_PREFIX):
        raise InvalidFormatError(f"Not a base58btc did:key: {did}")
    return did[len(DID_KEY_MULTIBASE_PREFIX) :]


def did_to_public_key(did: str) -> bytes:
    """Decode a did:key DID to its raw 32-byte Ed25519 public key.

    Raises:
        InvalidFormatError: If the DID is not an Ed25519 did:key
    """
    multibase = did_to_multibase(did)
    try:
        decoded = base58.b58decode(multibase)
    except ValueError as e:
        raise InvalidFormatError(f"did:key payload is not base58: {e}") from e

    if not decoded.startswith(ED25519_MULTICODEC_PREFIX):
        raise InvalidFormatError("did:key does not carry an ed25519-pub multicodec")

    public_key = decoded[len(ED25519_MULTICODEC_PREFIX) :]
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise InvalidFormatError(
            f"did:key public key has {len(public_key)} bytes, "
            f"expected {PUBLIC_KEY_LENGTH}"
        )
    return public_key


def extract_public_key_from_did(did: str) -> Optional[str]:
    """Hex public key for a did:key DID, or None if it cannot be decoded."""
    try:
        return did_to_public_key(did).hex()
    except InvalidFormatError:
        return None


def is_valid_did(did: str) -> bool:
    """Check whether a string is a decodable Ed25519 did:key."""
    return extract_public_key_from_did(did) is not None


def generate_nonce() -> str:
    """32 random bytes, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


def generate_did_keypair() -> DidKeyPair:
    """Generate a new Ed25519 keypair and its did:key."""
    private_key = ed25519.Ed25519PrivateKey.generate()
    private_bytes = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_bytes = public_key_bytes(private_key)
    return DidKeyPair(
        did=key_to_did(public_bytes),
        private_key_hex=private_bytes.hex(),
        public_key_hex=public_bytes.hex(),
    )


def format_did_env(pair: DidKeyPair) -> str:
    """Render a keypair as ``.env`` lines."""
    return f"AGENT_DID={pair.did}\nAGENT_PRIVATE_KEY={pair.private_key_hex}\n"
