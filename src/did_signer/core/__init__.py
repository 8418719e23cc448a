"""Core functionality for did-signer."""

from . import evm, keydid, solana
from .errors import (
    DidSignerError,
    CredentialError,
    MissingCredentialsError,
    DidFormatError,
    InvalidAddressError,
    InvalidFormatError,
    UnsupportedDidFormatError,
    InvalidKeyLengthError,
    ConfigurationError,
    ToolArgumentError,
)
from .models import (
    AuthPayload,
    Credential,
    Ed25519Credential,
    EvmCredential,
    Provider,
    SignatureResult,
    SolanaCredential,
    VerificationOutcome,
    make_credential,
)
from .nonces import NonceManager
from .strategy import (
    AuthStrategy,
    EvmAuthStrategy,
    KeyAuthStrategy,
    SolanaAuthStrategy,
    get_strategy,
)

__all__ = [
    # Providers
    "evm",
    "keydid",
    "solana",
    # Errors
    "DidSignerError",
    "CredentialError",
    "MissingCredentialsError",
    "DidFormatError",
    "InvalidAddressError",
    "InvalidFormatError",
    "UnsupportedDidFormatError",
    "InvalidKeyLengthError",
    "ConfigurationError",
    "ToolArgumentError",
    # Models
    "AuthPayload",
    "Credential",
    "Ed25519Credential",
    "EvmCredential",
    "Provider",
    "SignatureResult",
    "SolanaCredential",
    "VerificationOutcome",
    "make_credential",
    # Nonces
    "NonceManager",
    # Strategies
    "AuthStrategy",
    "EvmAuthStrategy",
    "KeyAuthStrategy",
    "SolanaAuthStrategy",
    "get_strategy",
]
