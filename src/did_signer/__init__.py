"""did-signer - Local DID signing for agents. Private keys never leave the process."""

from .agent import AgentSigner, build_auth_payload, sign_with_credential
from .config import SignerConfig, load_config
from .core import (
    AuthPayload,
    Credential,
    MissingCredentialsError,
    NonceManager,
    Provider,
    SignatureResult,
    get_strategy,
)
from .resolver import CredentialResolver, detect_provider, get_credentials_from_env

__version__ = "1.0.0"

__all__ = [
    # Agent
    "AgentSigner",
    "build_auth_payload",
    "sign_with_credential",
    # Config
    "SignerConfig",
    "load_config",
    # Core
    "AuthPayload",
    "Credential",
    "MissingCredentialsError",
    "NonceManager",
    "Provider",
    "SignatureResult",
    "get_strategy",
    # Resolver
    "CredentialResolver",
    "detect_provider",
    "get_credentials_from_env",
]
