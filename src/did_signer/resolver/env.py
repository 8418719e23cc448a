"""Credential resolution from environment variables."""

import logging
import os
from collections.abc import Mapping
from typing import Optional

from ..core import evm, solana
from ..core.errors import MissingCredentialsError
from ..core.keydid import DID_KEY_PREFIX
from ..core.models import Credential, Provider, make_credential

logger = logging.getLogger(__name__)

AGENT_DID = "AGENT_DID"
AGENT_PRIVATE_KEY = "AGENT_PRIVATE_KEY"
AGENT_SOLANA_DID = "AGENT_SOLANA_DID"
AGENT_SOLANA_PRIVATE_KEY = "AGENT_SOLANA_PRIVATE_KEY"
AGENT_EVM_DID = "AGENT_EVM_DID"
AGENT_EVM_PRIVATE_KEY = "AGENT_EVM_PRIVATE_KEY"

MISSING_CREDENTIALS_MESSAGE = (
    "No credentials found in environment variables. Please set AGENT_DID and "
    "AGENT_PRIVATE_KEY (or provider-specific variants)."
)


class CredentialResolver:
    """Reads DID and private key pairs from an environment mapping.

    The mapping is consulted on every call, so changes to ``os.environ``
    are picked up without rebuilding the resolver.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """Initialize resolver.

        Args:
            environ: Environment to read (default: ``os.environ``)
        """
        self.environ = os.environ if environ is None else environ

    def _get(self, *names: str) -> Optional[str]:
        # First non-empty variable wins
        for name in names:
            value = self.environ.get(name)
            if value:
                return value
        return None

    def _resolve_solana(self) -> Optional[Credential]:
        did = self._get(AGENT_SOLANA_DID, AGENT_DID)
        private_key = self._get(AGENT_SOLANA_PRIVATE_KEY, AGENT_PRIVATE_KEY)
        if not did or not private_key:
            return None
        if not (solana.is_valid_did(did) or solana.is_valid_address(did)):
            return None
        return make_credential(did, private_key, Provider.SOLANA)

    def _resolve_evm(self) -> Optional[Credential]:
        did = self._get(AGENT_EVM_DID, AGENT_DID)
        private_key = self._get(AGENT_EVM_PRIVATE_KEY, AGENT_PRIVATE_KEY)
        if not did or not private_key:
            return None
        if not (evm.is_valid_did(did) or evm.is_valid_address(did)):
            return None
        return make_credential(did, private_key, Provider.EVM)

    def _resolve_key(self) -> Optional[Credential]:
        did = self._get(AGENT_DID)
        private_key = self._get(AGENT_PRIVATE_KEY)
        if not did or not private_key:
            return None
        if not did.startswith(DID_KEY_PREFIX):
            return None
        return make_credential(did, private_key, Provider.KEY)

    def resolve(self, provider_hint: Optional[Provider] = None) -> Optional[Credential]:
        """Find the first credential that satisfies the hint.

        Solana is tried first, then EVM, then did:key. Without a hint, a
        generic ``AGENT_DID`` that happens to be a Solana or EVM identifier
        resolves to that provider.

        Args:
            provider_hint: Restrict resolution to one provider

        Returns:
            Resolved credential, or None if no variables match
        """
        hint = Provider(provider_hint) if provider_hint is not None else None
        checks = [
            (Provider.SOLANA, self._resolve_solana),
            (Provider.EVM, self._resolve_evm),
            (Provider.KEY, self._resolve_key),
        ]

        for provider, check in checks:
            if hint is not None and hint is not provider:
                continue
            credential = check()
            if credential is not None:
                logger.debug(
                    "Resolved %s credential for %s", provider.value, credential.did
                )
                return credential

        logger.debug(
            "No credentials resolved (hint=%s)", hint.value if hint else None
        )
        return None

    def require(self, provider_hint: Optional[Provider] = None) -> Credential:
        """Like ``resolve`` but raises when nothing matches.

        Raises:
            MissingCredentialsError: If no credential satisfies the hint
        """
        credential = self.resolve(provider_hint)
        if credential is None:
            raise MissingCredentialsError(MISSING_CREDENTIALS_MESSAGE)
        return credential


def get_credentials_from_env(
    provider: Optional[Provider] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Credential]:
    """Resolve a credential from the process environment."""
    return CredentialResolver(environ).resolve(provider)
