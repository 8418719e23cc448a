"""DID provider detection and credential resolution."""

from .detect import detect_provider
from .env import CredentialResolver, get_credentials_from_env

__all__ = ["detect_provider", "CredentialResolver", "get_credentials_from_env"]
