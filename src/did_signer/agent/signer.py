"""Agent signer: resolves credentials and dispatches to the provider."""

import logging
import time
from typing import Optional

import httpx

from ..core.models import AuthPayload, Credential, Provider, SignatureResult
from ..resolver.env import CredentialResolver

logger = logging.getLogger(__name__)

HEADER_DID = "X-Agent-DID"
HEADER_TIMESTAMP = "X-Agent-Timestamp"
HEADER_NONCE = "X-Agent-Nonce"
HEADER_SIGNATURE = "X-Agent-Signature"
HEADER_PROVIDER = "X-Agent-Provider"


def sign_with_credential(message: str, credential: Credential) -> str:
    """Sign a message with the credential's provider.

    Errors from the provider (bad key length, bad encoding) propagate unchanged.
    """
    return credential.strategy.sign_message(message, credential.secret())


def build_auth_payload(credential: Credential) -> AuthPayload:
    """Build a signed ``{did, timestamp, nonce, signature}`` payload.

    The signed message is ``<did>:<timestamp>:<nonce>`` with the timestamp in
    milliseconds and a fresh nonce in the provider's encoding.
    """
    strategy = credential.strategy
    timestamp = int(time.time() * 1000)
    nonce = strategy.generate_nonce()

    message = strategy.build_auth_message(credential.did, timestamp, nonce)
    signature = strategy.sign_message(message, credential.secret())

    return AuthPayload(
        did=credential.did,
        timestamp=timestamp,
        nonce=nonce,
        signature=signature,
        provider=credential.provider,
    )


class AgentSigner:
    """Signs messages and auth payloads with credentials from the environment."""

    def __init__(
        self,
        resolver: Optional[CredentialResolver] = None,
        default_provider: Optional[Provider] = None,
    ):
        """Initialize agent signer.

        Args:
            resolver: Credential source (default: reads ``os.environ``)
            default_provider: Provider hint used when a call does not pass one
        """
        self.resolver = resolver or CredentialResolver()
        self.default_provider = default_provider

    def _credential(self, provider: Optional[Provider]) -> Credential:
        return self.resolver.require(provider or self.default_provider)

    def create_did_signature(
        self, message: str, provider: Optional[Provider] = None
    ) -> SignatureResult:
        """Sign a message with the resolved DID.

        Args:
            message: Message to sign (typically an authentication challenge)
            provider: Provider hint (default: auto-detected from environment)

        Returns:
            SignatureResult with did, message, signature and provider

        Raises:
            MissingCredentialsError: If no credentials are configured
        """
        credential = self._credential(provider)
        signature = sign_with_credential(message, credential)
        logger.info(
            "Signed message with %s DID %s", credential.provider.value, credential.did
        )
        return SignatureResult(
            did=credential.did,
            message=message,
            signature=signature,
            provider=credential.provider,
        )

    def generate_auth_payload(self, provider: Optional[Provider] = None) -> AuthPayload:
        """Generate a complete signed authentication payload.

        Raises:
            MissingCredentialsError: If no credentials are configured
        """
        credential = self._credential(provider)
        payload = build_auth_payload(credential)
        logger.info(
            "Generated %s auth payload for %s", credential.provider.value, credential.did
        )
        return payload

    def sign_request(
        self, request: httpx.Request, provider: Optional[Provider] = None
    ) -> httpx.Request:
        """Attach a fresh auth payload to an HTTP request.

        The request is not sent.

        Args:
            request: HTTP request to sign
            provider: Provider hint

        Returns:
            New request with the X-Agent-* headers added
        """
        payload = self.generate_auth_payload(provider)

        new_headers = dict(request.headers)
        new_headers.update(auth_headers(payload))

        return httpx.Request(
            method=request.method,
            url=request.url,
            headers=new_headers,
            content=request.content,
        )


def auth_headers(payload: AuthPayload) -> dict[str, str]:
    """Render an auth payload as HTTP headers."""
    return {
        HEADER_DID: payload.did,
        HEADER_TIMESTAMP: str(payload.timestamp),
        HEADER_NONCE: payload.nonce,
        HEADER_SIGNATURE: payload.signature,
        HEADER_PROVIDER: payload.provider.value,
    }
