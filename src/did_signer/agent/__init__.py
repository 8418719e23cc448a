"""Agent-side signing."""

from .signer import AgentSigner, auth_headers, build_auth_payload, sign_with_credential

__all__ = ["AgentSigner", "auth_headers", "build_auth_payload", "sign_with_credential"]
