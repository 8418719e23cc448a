"""Per-provider signing strategies.

Each provider's codec and signer module is wrapped in an ``AuthStrategy`` so
that callers holding a credential never branch on the provider themselves.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from . import evm, keydid, solana
from .errors import DidFormatError
from .models import AuthPayload, Provider, build_auth_message

logger = logging.getLogger(__name__)

DEFAULT_TIMESTAMP_WINDOW_MS = 5 * 60 * 1000
MAX_CLOCK_SKEW_MS = 60 * 1000


class AuthStrategy(ABC):
    """Signs and verifies messages for one provider."""

    provider: Provider

    @abstractmethod
    def sign_message(self, message: str, private_key: str) -> str:
        """Sign ``message`` and return the provider-encoded signature."""

    @abstractmethod
    def verify_signature(
        self, message: str, signature: str, public_key_or_address: str
    ) -> bool:
        """Verify a signature; never raises."""

    @abstractmethod
    def to_did(self, identifier: Any, *args: Any) -> str:
        """Convert an address or public key to a DID."""

    @abstractmethod
    def from_did(self, did: str) -> str:
        """Extract the address or public key a signature is checked against."""

    @abstractmethod
    def is_valid_did(self, did: str) -> bool:
        """Check the DID grammar for this provider."""

    @abstractmethod
    def generate_nonce(self) -> str:
        """32 random bytes in the provider's encoding."""

    def build_auth_message(self, did: str, timestamp: int, nonce: str) -> str:
        return build_auth_message(did, timestamp, nonce)

    def verify_timestamp(
        self,
        timestamp: int,
        window_ms: int = DEFAULT_TIMESTAMP_WINDOW_MS,
        now: Optional[int] = None,
    ) -> bool:
        """Check that a millisecond timestamp is recent.

        Args:
            timestamp: Milliseconds since the epoch
            window_ms: Maximum accepted age
            now: Current time in milliseconds (default: wall clock)

        Returns:
            False if older than the window or more than 60s in the future
        """
        if now is None:
            now = int(time.time() * 1000)

        if now - timestamp > window_ms:
            return False

        if timestamp - now > MAX_CLOCK_SKEW_MS:
            return False

        return True

    def verify_auth_payload(
        self, payload: AuthPayload, window_ms: int = DEFAULT_TIMESTAMP_WINDOW_MS
    ) -> bool:
        """Verify a payload's signature against its own DID and its freshness."""
        if payload.provider is not self.provider:
            logger.warning(
                "Payload provider %s does not match strategy %s",
                payload.provider.value,
                self.provider.value,
            )
            return False

        if not self.verify_timestamp(payload.timestamp, window_ms):
            logger.info("Auth payload timestamp %d is outside window", payload.timestamp)
            return False

        try:
            signer_id = self.from_did(payload.did)
        except DidFormatError as e:
            logger.warning("Cannot verify payload for %s: %s", payload.did, e)
            return False

        return self.verify_signature(payload.message, payload.signature, signer_id)


class KeyAuthStrategy(AuthStrategy):
    """Ed25519 did:key."""

    provider = Provider.KEY

    def sign_message(self, message: str, private_key: str) -> str:
        return keydid.sign_message(message, private_key)

    def verify_signature(
        self, message: str, signature: str, public_key_or_address: str
    ) -> bool:
        return keydid.verify_signature(message, signature, public_key_or_address)

    def to_did(self, identifier: Any, *args: Any) -> str:
        if isinstance(identifier, str):
            identifier = bytes.fromhex(identifier)
        return keydid.key_to_did(identifier)

    def from_did(self, did: str) -> str:
        return keydid.did_to_public_key(did).hex()

    def is_valid_did(self, did: str) -> bool:
        return keydid.is_valid_did(did)

    def generate_nonce(self) -> str:
        return keydid.generate_nonce()


class SolanaAuthStrategy(AuthStrategy):
    """Solana did:pkh; raw base58 addresses are accepted as DIDs."""

    provider = Provider.SOLANA

    def sign_message(self, message: str, private_key: str) -> str:
        return solana.sign_message(message, private_key)

    def verify_signature(
        self, message: str, signature: str, public_key_or_address: str
    ) -> bool:
        return solana.verify_signature(message, signature, public_key_or_address)

    def to_did(self, identifier: Any, *args: Any) -> str:
        return solana.wallet_address_to_did(identifier, *args)

    def from_did(self, did: str) -> str:
        if solana.is_valid_address(did):
            return did
        return solana.did_to_wallet_address(did)

    def is_valid_did(self, did: str) -> bool:
        return solana.is_valid_did(did)

    def generate_nonce(self) -> str:
        return solana.generate_nonce()


class EvmAuthStrategy(AuthStrategy):
    """EVM did:ethr and did:pkh:eip155; raw addresses are accepted as DIDs."""

    provider = Provider.EVM

    def sign_message(self, message: str, private_key: str) -> str:
        return evm.sign_message(message, private_key)

    def verify_signature(
        self, message: str, signature: str, public_key_or_address: str
    ) -> bool:
        return evm.verify_signature(message, signature, public_key_or_address)

    def to_did(self, identifier: Any, *args: Any) -> str:
        return evm.address_to_ethr_did(identifier, *args)

    def from_did(self, did: str) -> str:
        if evm.is_valid_address(did):
            return did.lower()
        return evm.did_to_address(did)

    def is_valid_did(self, did: str) -> bool:
        return evm.is_valid_did(did)

    def generate_nonce(self) -> str:
        return evm.generate_nonce()


_STRATEGIES: dict[Provider, AuthStrategy] = {
    Provider.KEY: KeyAuthStrategy(),
    Provider.SOLANA: SolanaAuthStrategy(),
    Provider.EVM: EvmAuthStrategy(),
}


def get_strategy(provider: Provider) -> AuthStrategy:
    """Return the shared strategy instance for a provider."""
    return _STRATEGIES[Provider(provider)]
