"""Core data models for did-signer."""

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Literal, Union

from pydantic import BaseModel, Field, SecretStr

if TYPE_CHECKING:
    from .strategy import AuthStrategy


class Provider(str, Enum):
    """Cryptographic scheme a DID belongs to."""

    KEY = "key"
    SOLANA = "solana"
    EVM = "evm"


class VerificationOutcome(str, Enum):
    """Why a verification succeeded or failed.

    Only ``VALID`` maps to ``True`` at the public boundary; the other two
    values are logged so that a bad signature can be told apart from
    undecodable input.
    """

    VALID = "valid"
    MISMATCH = "mismatch"
    MALFORMED = "malformed"


class _BaseCredential(BaseModel):
    """A DID and its private key, as read from the environment."""

    did: str = Field(description="Decentralized identifier")
    private_key: SecretStr = Field(description="Provider-encoded private key")

    model_config = {"frozen": True}

    @property
    def strategy(self) -> "AuthStrategy":
        """Signer/verifier for this credential's provider."""
        from .strategy import get_strategy

        return get_strategy(self.provider)

    def secret(self) -> str:
        """Return the raw private key string."""
        return self.private_key.get_secret_value()


class Ed25519Credential(_BaseCredential):
    """did:key credential; private key is a 64-char hex Ed25519 seed."""

    provider: Literal[Provider.KEY] = Provider.KEY


class SolanaCredential(_BaseCredential):
    """did:pkh:solana credential; private key is a base58 64-byte keypair."""

    provider: Literal[Provider.SOLANA] = Provider.SOLANA


class EvmCredential(_BaseCredential):
    """did:ethr / did:pkh:eip155 credential; private key is hex, 0x optional."""

    provider: Literal[Provider.EVM] = Provider.EVM


Credential = Annotated[
    Union[Ed25519Credential, SolanaCredential, EvmCredential],
    Field(discriminator="provider"),
]

CREDENTIAL_TYPES: dict[Provider, type[_BaseCredential]] = {
    Provider.KEY: Ed25519Credential,
    Provider.SOLANA: SolanaCredential,
    Provider.EVM: EvmCredential,
}


def make_credential(did: str, private_key: str, provider: Provider) -> Credential:
    """Build the credential variant matching ``provider``."""
    return CREDENTIAL_TYPES[Provider(provider)](did=did, private_key=private_key)


class SignatureResult(BaseModel):
    """A message signed with the resolved credential."""

    did: str = Field(description="Signer DID")
    message: str = Field(description="Message that was signed")
    signature: str = Field(description="Provider-encoded signature")
    provider: Provider = Field(description="Provider used for signing")


class AuthPayload(BaseModel):
    """Authentication payload ready to hand to the remote service."""

    did: str = Field(description="Signer DID")
    timestamp: int = Field(description="Milliseconds since the epoch")
    nonce: str = Field(description="Single-use random value")
    signature: str = Field(description="Signature over the auth message")
    provider: Provider = Field(description="Provider used for signing")

    @property
    def message(self) -> str:
        """The signed message: ``<did>:<timestamp>:<nonce>``."""
        return build_auth_message(self.did, self.timestamp, self.nonce)


def build_auth_message(did: str, timestamp: int, nonce: str) -> str:
    """Build the authentication message covered by the signature."""
    return f"{did}:{timestamp}:{nonce}"
