"""Tests for the agent signer (dispatch layer)."""

import base64

import base58
import httpx
import pytest

from did_signer import AgentSigner, CredentialResolver, get_strategy
from did_signer.agent.signer import (
    HEADER_DID,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
    build_auth_payload,
    sign_with_credential,
)
from did_signer.core import evm, keydid, solana
from did_signer.core.errors import InvalidKeyLengthError, MissingCredentialsError
from did_signer.core.models import AuthPayload, Provider, make_credential


@pytest.fixture
def key_credential(key_pair):
    return make_credential(key_pair.did, key_pair.private_key_hex, Provider.KEY)


@pytest.fixture
def solana_credential(solana_wallet):
    return make_credential(solana_wallet.did, solana_wallet.keypair, Provider.SOLANA)


@pytest.fixture
def evm_credential(evm_did, evm_private_key):
    return make_credential(evm_did, evm_private_key, Provider.EVM)


def test_sign_with_key_credential(key_credential, key_pair):
    signature = sign_with_credential("challenge", key_credential)

    assert keydid.verify_signature("challenge", signature, key_pair.public_key_hex)


def test_sign_with_solana_credential(solana_credential, solana_wallet):
    signature = sign_with_credential("challenge", solana_credential)

    assert solana.verify_signature("challenge", signature, solana_wallet.address)


def test_sign_with_evm_credential(evm_credential, evm_address):
    signature = sign_with_credential("challenge", evm_credential)

    assert evm.verify_signature("challenge", signature, evm_address)


def test_signing_errors_propagate(solana_wallet):
    """A bad key surfaces the provider's own error."""
    credential = make_credential(solana_wallet.did, solana_wallet.address, Provider.SOLANA)

    with pytest.raises(InvalidKeyLengthError, match="Expected 64 bytes"):
        sign_with_credential("challenge", credential)


@pytest.mark.parametrize(
    "credential_fixture", ["key_credential", "solana_credential", "evm_credential"]
)
def test_auth_payload_verifies(request, credential_fixture):
    """Payloads sign <did>:<timestamp>:<nonce> and verify against their DID."""
    credential = request.getfixturevalue(credential_fixture)
    payload = build_auth_payload(credential)

    assert payload.did == credential.did
    assert payload.provider is credential.provider
    assert payload.message == f"{payload.did}:{payload.timestamp}:{payload.nonce}"
    assert get_strategy(credential.provider).verify_auth_payload(payload)


def test_auth_payload_nonce_encoding(key_credential, solana_credential, evm_credential):
    """Nonces use base64 for key and evm, base58 for solana."""
    assert len(base64.b64decode(build_auth_payload(key_credential).nonce)) == 32
    assert len(base58.b58decode(build_auth_payload(solana_credential).nonce)) == 32
    assert len(base64.b64decode(build_auth_payload(evm_credential).nonce)) == 32


def test_auth_payloads_are_fresh(key_credential):
    """Two payloads in a row never share a nonce, so signatures differ."""
    first = build_auth_payload(key_credential)
    second = build_auth_payload(key_credential)

    assert first.nonce != second.nonce
    assert first.signature != second.signature


def test_tampered_payload_fails(key_credential):
    payload = build_auth_payload(key_credential)
    tampered = payload.model_copy(update={"nonce": "AAAA"})

    assert not get_strategy(Provider.KEY).verify_auth_payload(tampered)


def test_stale_payload_fails(key_credential):
    """Payloads older than the window fail verification."""
    payload = build_auth_payload(key_credential)
    strategy = get_strategy(Provider.KEY)

    assert not strategy.verify_auth_payload(payload, window_ms=-1)
    assert strategy.verify_timestamp(1_000_000, now=1_000_000 + 299_000)
    assert not strategy.verify_timestamp(1_000_000, now=1_000_000 + 301_000)
    assert not strategy.verify_timestamp(1_000_000 + 61_000, now=1_000_000)


def test_payload_for_wrong_provider_fails(key_credential):
    payload = build_auth_payload(key_credential)

    assert not get_strategy(Provider.EVM).verify_auth_payload(payload)


def test_payload_with_undecodable_did_fails(solana_credential):
    payload = build_auth_payload(solana_credential)
    broken = payload.model_copy(
        update={"did": "did:pkh:solana:4sGjMW1sUnHzSxGspuhpqLDx6wiyjNtZ:0OIl"}
    )

    assert not get_strategy(Provider.SOLANA).verify_auth_payload(broken)


def test_agent_signer_create_did_signature(key_pair):
    signer = AgentSigner(
        CredentialResolver(
            {"AGENT_DID": key_pair.did, "AGENT_PRIVATE_KEY": key_pair.private_key_hex}
        )
    )

    result = signer.create_did_signature("hello")
    assert result.did == key_pair.did
    assert result.message == "hello"
    assert result.provider is Provider.KEY
    assert keydid.verify_signature("hello", result.signature, key_pair.public_key_hex)


def test_agent_signer_default_provider(key_pair, evm_did, evm_private_key):
    """The configured default provider is used when a call has no hint."""
    environ = {
        "AGENT_DID": key_pair.did,
        "AGENT_PRIVATE_KEY": key_pair.private_key_hex,
        "AGENT_EVM_DID": evm_did,
        "AGENT_EVM_PRIVATE_KEY": evm_private_key,
    }
    signer = AgentSigner(CredentialResolver(environ), default_provider=Provider.KEY)

    assert signer.generate_auth_payload().provider is Provider.KEY
    assert signer.generate_auth_payload(Provider.EVM).provider is Provider.EVM


def test_agent_signer_without_credentials():
    signer = AgentSigner(CredentialResolver({}))

    with pytest.raises(MissingCredentialsError, match="No credentials found"):
        signer.create_did_signature("hello")

    with pytest.raises(MissingCredentialsError):
        signer.generate_auth_payload()


def test_sign_request_adds_headers(solana_wallet):
    """Signed requests carry a verifiable auth payload in headers."""
    signer = AgentSigner(
        CredentialResolver(
            {
                "AGENT_SOLANA_DID": solana_wallet.did,
                "AGENT_SOLANA_PRIVATE_KEY": solana_wallet.keypair,
            }
        )
    )
    request = httpx.Request(
        method="POST",
        url="https://service.example.com/api/authenticate",
        headers={"Content-Type": "application/json"},
        json={"hello": "world"},
    )

    signed_request = signer.sign_request(request)

    assert signed_request.headers[HEADER_DID] == solana_wallet.did
    assert signed_request.headers["X-Agent-Provider"] == "solana"
    assert signed_request.content == request.content

    payload = AuthPayload(
        did=signed_request.headers[HEADER_DID],
        timestamp=int(signed_request.headers[HEADER_TIMESTAMP]),
        nonce=signed_request.headers[HEADER_NONCE],
        signature=signed_request.headers[HEADER_SIGNATURE],
        provider=Provider.SOLANA,
    )
    assert get_strategy(Provider.SOLANA).verify_auth_payload(payload)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
