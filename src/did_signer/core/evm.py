"""EVM (Ethereum) signing and did:ethr / did:pkh:eip155 encoding.

Messages are signed as EIP-191 personal messages, so a signature produced
here is what a wallet's ``personal_sign`` would return for the same text.
"""

import base64
import logging
import secrets
from typing import NamedTuple, Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys import keys
from web3 import Web3

from .errors import (
    InvalidAddressError,
    InvalidFormatError,
    InvalidKeyLengthError,
    UnsupportedDidFormatError,
)
from .models import VerificationOutcome

logger = logging.getLogger(__name__)

ETHR_DID_PREFIX = "did:ethr:"
PKH_EIP155_DID_PREFIX = "did:pkh:eip155:"

MAINNET_CHAIN_ID = 1
PRIVATE_KEY_LENGTH = 32
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# did:ethr network names and their chain ids
NETWORK_CHAIN_IDS: dict[str, int] = {
    "mainnet": 1,
    "goerli": 5,
    "sepolia": 11155111,
    "polygon": 137,
    "optimism": 10,
    "arbitrum": 42161,
}


class EvmWallet(NamedTuple):
    """A freshly generated EVM wallet."""

    address: str
    private_key: str
    did: str
    pkh_did: str


def _private_key_bytes(private_key_hex: str) -> bytes:
    key = private_key_hex[2:] if private_key_hex.startswith("0x") else private_key_hex
    try:
        key_bytes = bytes.fromhex(key)
    except ValueError as e:
        raise InvalidFormatError(f"EVM private key is not valid hex: {e}") from e
    if len(key_bytes) != PRIVATE_KEY_LENGTH:
        raise InvalidKeyLengthError(
            f"Invalid private key length. Expected {PRIVATE_KEY_LENGTH} bytes, "
            f"got {len(key_bytes)}."
        )
    if not 0 < int.from_bytes(key_bytes, "big") < SECP256K1_ORDER:
        raise InvalidFormatError("EVM private key is outside the secp256k1 range")
    return key_bytes


def _normalize_address(address: str) -> str:
    lowered = address.lower()
    return lowered if lowered.startswith("0x") else f"0x{lowered}"


def is_valid_address(address: str) -> bool:
    """Check an EVM address (mixed case must carry a valid EIP-55 checksum)."""
    try:
        return Web3.is_address(address)
    except (TypeError, ValueError):
        return False


def sign_message(message: str, private_key_hex: str) -> str:
    """Sign a message as an EIP-191 personal message.

    Args:
        message: Message to sign
        private_key_hex: 32-byte private key in hex, with or without ``0x``

    Returns:
        ``0x``-prefixed 65-byte signature (r || s || v)
    """
    key_bytes = _private_key_bytes(private_key_hex)
    signed = Account.sign_message(encode_defunct(text=message), private_key=key_bytes)
    return "0x" + bytes(signed.signature).hex()


def check_signature(
    message: str, signature: str, expected_address: str
) -> VerificationOutcome:
    """Recover the signer and compare it with the expected address."""
    try:
        recovered = Account.recover_message(
            encode_defunct(text=message), signature=signature
        )
    except Exception as e:
        logger.warning("EVM signature verification error: %s", e)
        return VerificationOutcome.MALFORMED

    if recovered.lower() != _normalize_address(expected_address):
        logger.info(
            "EVM signature recovered %s, expected %s", recovered, expected_address
        )
        return VerificationOutcome.MISMATCH
    return VerificationOutcome.VALID


def verify_signature(message: str, signature: str, expected_address: str) -> bool:
    """Verify an EIP-191 signature against an address.

    Args:
        message: Original message
        signature: Signature in hex
        expected_address: Address the signature should recover to (any case)

    Returns:
        True if the recovered signer matches, False otherwise (including
        malformed input)
    """
    return check_signature(message, signature, expected_address) is (
        VerificationOutcome.VALID
    )


def address_to_ethr_did(
    address: str,
    chain_id: Optional[Union[int, str]] = None,
    network: Optional[str] = None,
) -> str:
    """Convert an address to did:ethr.

    A network name other than ``mainnet`` takes precedence over ``chain_id``.
    Integer chain ids are written in hex. Mainnet is the bare form.

    Raises:
        InvalidAddressError: If the address is malformed
    """
    normalized = _normalize_address(address)
    if not is_valid_address(normalized):
        raise InvalidAddressError(f"Invalid Ethereum address: {address}")

    if network and network != "mainnet":
        return f"{ETHR_DID_PREFIX}{network}:{normalized}"
    if chain_id and chain_id not in (MAINNET_CHAIN_ID, "0x1"):
        hex_chain_id = hex(chain_id) if isinstance(chain_id, int) else chain_id
        return f"{ETHR_DID_PREFIX}{hex_chain_id}:{normalized}"
    return f"{ETHR_DID_PREFIX}{normalized}"


def address_to_pkh_did(address: str, chain_id: int = MAINNET_CHAIN_ID) -> str:
    """Convert an address to did:pkh:eip155.

    Raises:
        InvalidAddressError: If the address is malformed
    """
    normalized = _normalize_address(address)
    if not is_valid_address(normalized):
        raise InvalidAddressError(f"Invalid Ethereum address: {address}")
    return f"{PKH_EIP155_DID_PREFIX}{chain_id}:{normalized}"


def did_to_address(did: str) -> str:
    """Extract the lower-cased address from a did:ethr or did:pkh:eip155.

    Raises:
        InvalidFormatError: If the DID has the wrong number of segments
        UnsupportedDidFormatError: If the DID is neither did:ethr nor did:pkh:eip155
    """
    parts = did.split(":")
    if did.startswith(ETHR_DID_PREFIX):
        # did:ethr:<address> or did:ethr:<network|chainId>:<address>
        if len(parts) == 3:
            return parts[2].lower()
        if len(parts) == 4:
            return parts[3].lower()
        raise InvalidFormatError(f"Invalid did:ethr format: {did}")

    if did.startswith(PKH_EIP155_DID_PREFIX):
        if len(parts) != 5:
            raise InvalidFormatError(
                "Invalid did:pkh:eip155 format. "
                "Expected did:pkh:eip155:chainId:address"
            )
        return parts[4].lower()

    raise UnsupportedDidFormatError(
        f"Unsupported DID format. Expected did:ethr or did:pkh:eip155: {did}"
    )


def extract_chain_id(did: str) -> Optional[int]:
    """Chain id named by an EVM DID, or None if it cannot be determined."""
    parts = did.split(":")
    if did.startswith(ETHR_DID_PREFIX):
        if len(parts) == 3:
            return MAINNET_CHAIN_ID
        if len(parts) == 4:
            network_or_chain_id = parts[2]
            if network_or_chain_id.startswith("0x"):
                try:
                    return int(network_or_chain_id, 16)
                except ValueError:
                    return None
            return NETWORK_CHAIN_IDS.get(network_or_chain_id)
    elif did.startswith(PKH_EIP155_DID_PREFIX) and len(parts) == 5:
        try:
            return int(parts[3], 10)
        except ValueError:
            return None
    return None


def is_valid_did(did: str) -> bool:
    """Check whether a string is an EVM DID carrying a valid address."""
    try:
        return is_valid_address(did_to_address(did))
    except InvalidFormatError:
        return False


def public_key_from_private(private_key_hex: str) -> str:
    """Compressed secp256k1 public key (``0x``-prefixed hex)."""
    public_key = keys.PrivateKey(_private_key_bytes(private_key_hex)).public_key
    return "0x" + public_key.to_compressed_bytes().hex()


def address_from_private(private_key_hex: str) -> str:
    """Lower-cased address controlled by a private key."""
    return Account.from_key(_private_key_bytes(private_key_hex)).address.lower()


def generate_nonce() -> str:
    """32 random bytes, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


def generate_wallet() -> EvmWallet:
    """Generate a new EVM wallet (for testing/development)."""
    account = Account.create()
    return EvmWallet(
        address=account.address.lower(),
        private_key="0x" + bytes(account.key).hex(),
        did=address_to_ethr_did(account.address),
        pkh_did=address_to_pkh_did(account.address),
    )
