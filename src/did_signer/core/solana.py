"""Solana signing and did:pkh encoding.

Solana accounts are Ed25519 public keys written in base58. A wallet's secret
is the 64-byte keypair ``seed || public_key``, also base58. DIDs follow the
did:pkh method with a CAIP-10 account id::

    did:pkh:solana:4sGjMW1sUnHzSxGspuhpqLDx6wiyjNtZ:<address>
"""

import logging
import secrets
from typing import NamedTuple

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from .errors import InvalidAddressError, InvalidFormatError, InvalidKeyLengthError
from .keydid import public_key_bytes
from .models import VerificationOutcome

logger = logging.getLogger(__name__)

# CAIP-2 chain id: "solana:" + first 32 chars of the mainnet genesis hash
SOLANA_MAINNET_CHAIN_ID = "solana:4sGjMW1sUnHzSxGspuhpqLDx6wiyjNtZ"
SOLANA_DID_PREFIX = "did:pkh:solana:"

ADDRESS_LENGTH = 32
KEYPAIR_LENGTH = 64
SIGNATURE_LENGTH = 64


class SolanaKeyPair(NamedTuple):
    """A freshly generated Solana wallet."""

    address: str
    keypair: str
    did: str


def _b58decode(value: str) -> bytes:
    try:
        return base58.b58decode(value)
    except ValueError as e:
        raise InvalidFormatError(f"Value is not base58: {e}") from e


def is_valid_address(address: str) -> bool:
    """A Solana address is any base58 string that decodes to 32 bytes."""
    try:
        return len(base58.b58decode(address)) == ADDRESS_LENGTH
    except ValueError:
        return False


def wallet_address_to_did(
    address: str, chain_id: str = SOLANA_MAINNET_CHAIN_ID
) -> str:
    """Convert a wallet address to did:pkh.

    Args:
        address: Base58 Solana address
        chain_id: CAIP-2 chain id (default: mainnet)

    Returns:
        DID in the form ``did:pkh:<chain_id>:<address>``

    Raises:
        InvalidAddressError: If the address is not a valid Solana address
    """
    if not is_valid_address(address):
        raise InvalidAddressError(f"Invalid Solana wallet address: {address}")
    return f"did:pkh:{chain_id}:{address}"


def did_to_wallet_address(did: str) -> str:
    """Extract the wallet address from a Solana did:pkh.

    Raises:
        InvalidFormatError: If the DID is not ``did:pkh:solana:<chain>:<address>``
        InvalidAddressError: If the embedded address is not valid
    """
    if not did.startswith(SOLANA_DID_PREFIX):
        raise InvalidFormatError(f"Invalid Solana did:pkh format: {did}")

    parts = did.split(":")
    if len(parts) != 5:
        raise InvalidFormatError(
            "Invalid did:pkh format. Expected did:pkh:solana:chainId:address"
        )

    address = parts[4]
    if not is_valid_address(address):
        raise InvalidAddressError(f"Invalid Solana address in DID: {address}")
    return address


def is_valid_did(did: str) -> bool:
    """Check whether a string is a well-formed Solana did:pkh."""
    try:
        did_to_wallet_address(did)
    except (InvalidFormatError, InvalidAddressError):
        return False
    return True


def _private_key_from_keypair(keypair_bytes: bytes) -> ed25519.Ed25519PrivateKey:
    if len(keypair_bytes) != KEYPAIR_LENGTH:
        raise InvalidKeyLengthError(
            f"Invalid private key length. Expected {KEYPAIR_LENGTH} bytes for "
            f"Solana keypair, got {len(keypair_bytes)}."
        )
    # The first half is the Ed25519 seed, the second its public key
    private_key = ed25519.Ed25519PrivateKey.from_private_bytes(keypair_bytes[:32])
    if public_key_bytes(private_key) != keypair_bytes[32:]:
        raise InvalidFormatError("Solana keypair public key does not match its seed")
    return private_key


def sign_message(message: str, keypair_base58: str) -> str:
    """Sign a message with a Solana keypair.

    Args:
        message: Message to sign (UTF-8 encoded before signing)
        keypair_base58: 64-byte keypair in base58

    Returns:
        Detached signature in base58

    Raises:
        InvalidFormatError: If the keypair is not base58 or its halves disagree
        InvalidKeyLengthError: If the keypair does not decode to 64 bytes
    """
    private_key = _private_key_from_keypair(_b58decode(keypair_base58))
    signature = private_key.sign(message.encode("utf-8"))
    return base58.b58encode(signature).decode("ascii")


def check_signature(
    message: str, signature_base58: str, public_key_base58: str
) -> VerificationOutcome:
    """Verify a signature and report why it failed, if it did."""
    try:
        signature = base58.b58decode(signature_base58)
        public_key_raw = base58.b58decode(public_key_base58)
    except ValueError as e:
        logger.warning("Solana verification input is not base58: %s", e)
        return VerificationOutcome.MALFORMED

    if len(public_key_raw) != ADDRESS_LENGTH:
        logger.warning(
            "Invalid public key length. Expected %d bytes, got %d.",
            ADDRESS_LENGTH,
            len(public_key_raw),
        )
        return VerificationOutcome.MALFORMED

    if len(signature) != SIGNATURE_LENGTH:
        logger.warning(
            "Invalid signature length. Expected %d bytes, got %d.",
            SIGNATURE_LENGTH,
            len(signature),
        )
        return VerificationOutcome.MALFORMED

    try:
        public_key = ed25519.Ed25519PublicKey.from_public_bytes(public_key_raw)
        public_key.verify(signature, message.encode("utf-8"))
    except InvalidSignature:
        logger.info("Solana signature does not match public key")
        return VerificationOutcome.MISMATCH
    except ValueError as e:
        logger.warning("Solana public key rejected: %s", e)
        return VerificationOutcome.MALFORMED
    return VerificationOutcome.VALID


def verify_signature(
    message: str, signature_base58: str, public_key_base58: str
) -> bool:
    """Verify a Solana signature.

    Args:
        message: Original message
        signature_base58: Signature in base58 (64 bytes)
        public_key_base58: Public key / address in base58 (32 bytes)

    Returns:
        True if the signature is valid, False otherwise (including malformed input)
    """
    outcome = check_signature(message, signature_base58, public_key_base58)
    return outcome is VerificationOutcome.VALID


def extract_public_key(keypair_base58: str) -> str:
    """Return the public half of a 64-byte keypair, base58-encoded.

    Raises:
        InvalidKeyLengthError: If the keypair does not decode to 64 bytes
    """
    keypair_bytes = _b58decode(keypair_base58)
    if len(keypair_bytes) != KEYPAIR_LENGTH:
        raise InvalidKeyLengthError(
            f"Invalid keypair length. Expected {KEYPAIR_LENGTH} bytes, "
            f"got {len(keypair_bytes)}."
        )
    return base58.b58encode(keypair_bytes[32:]).decode("ascii")


def address_from_public_key(public_key_base58: str) -> str:
    """A Solana address is its base58 public key; this only validates it.

    Raises:
        InvalidAddressError: If the key is not 32 bytes
    """
    if not is_valid_address(public_key_base58):
        raise InvalidAddressError(
            f"Failed to get address from public key: {public_key_base58}"
        )
    return public_key_base58


def generate_nonce() -> str:
    """32 random bytes, base58-encoded."""
    return base58.b58encode(secrets.token_bytes(32)).decode("ascii")


def generate_keypair(chain_id: str = SOLANA_MAINNET_CHAIN_ID) -> SolanaKeyPair:
    """Generate a new Solana wallet (for testing/development)."""
    private_key = ed25519.Ed25519PrivateKey.generate()
    seed = private_key.private_bytes_raw()
    public_raw = public_key_bytes(private_key)

    address = base58.b58encode(public_raw).decode("ascii")
    return SolanaKeyPair(
        address=address,
        keypair=base58.b58encode(seed + public_raw).decode("ascii"),
        did=wallet_address_to_did(address, chain_id),
    )
