#!/usr/bin/env python3
"""
Basic example demonstrating the did-signer workflow:
1. Generate identities for each provider
2. Agent signs a challenge and builds an auth payload from its environment
3. The receiving side verifies the payload and rejects a replay
"""

import httpx

from did_signer import (
    AgentSigner,
    CredentialResolver,
    NonceManager,
    Provider,
    detect_provider,
    get_strategy,
)
from did_signer.core import evm, keydid, solana


def main():
    print("=== did-signer - Basic Example ===\n")

    # ============================================================================
    # STEP 1: Generate one identity per provider
    # ============================================================================
    print("1. Generating identities...")
    key_pair = keydid.generate_did_keypair()
    solana_wallet = solana.generate_keypair()
    evm_wallet = evm.generate_wallet()

    for did in (key_pair.did, solana_wallet.did, evm_wallet.did):
        print(f"   ✓ {detect_provider(did).value:>6}: {did}")
    print()

    # In production these come from the process environment
    environ = {
        "AGENT_DID": key_pair.did,
        "AGENT_PRIVATE_KEY": key_pair.private_key_hex,
        "AGENT_SOLANA_DID": solana_wallet.did,
        "AGENT_SOLANA_PRIVATE_KEY": solana_wallet.keypair,
        "AGENT_EVM_DID": evm_wallet.did,
        "AGENT_EVM_PRIVATE_KEY": evm_wallet.private_key,
    }
    signer = AgentSigner(CredentialResolver(environ))

    # ============================================================================
    # STEP 2: Sign a challenge with each provider
    # ============================================================================
    print("2. Signing a challenge...")
    for provider in Provider:
        result = signer.create_did_signature("login-challenge-42", provider)
        print(f"   ✓ {provider.value:>6}: {result.signature[:24]}...")
    print()

    # ============================================================================
    # STEP 3: Build an auth payload and attach it to a request
    # ============================================================================
    print("3. Building auth payload...")
    payload = signer.generate_auth_payload(Provider.EVM)
    print(f"   DID:       {payload.did}")
    print(f"   Timestamp: {payload.timestamp}")
    print(f"   Nonce:     {payload.nonce}")

    request = httpx.Request("POST", "https://service.example.com/authenticate")
    signed_request = signer.sign_request(request, Provider.KEY)
    print(f"   ✓ Request headers: {sorted(k for k in signed_request.headers if k.startswith('x-agent'))}\n")

    # ============================================================================
    # STEP 4: Verifier side
    # ============================================================================
    print("4. Verifying payload...")
    nonces = NonceManager()
    strategy = get_strategy(payload.provider)

    valid = strategy.verify_auth_payload(payload)
    print(f"   ✓ Signature valid: {valid}")

    print(f"   ✓ First use replayed: {nonces.is_used(payload.nonce, payload.timestamp)}")
    print(f"   ✓ Second use replayed: {nonces.is_used(payload.nonce, payload.timestamp)}")


if __name__ == "__main__":
    main()
