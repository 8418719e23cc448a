"""Shared fixtures for did-signer tests."""

import pytest

from did_signer.core import evm, keydid, solana
from did_signer.resolver import env as env_vars

# Hardhat/Anvil development account #0
EVM_PRIVATE_KEY = "0xac0974bec39a17e36ba4a4b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
EVM_ADDRESS = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"

_AGENT_VARS = [
    env_vars.AGENT_DID,
    env_vars.AGENT_PRIVATE_KEY,
    env_vars.AGENT_SOLANA_DID,
    env_vars.AGENT_SOLANA_PRIVATE_KEY,
    env_vars.AGENT_EVM_DID,
    env_vars.AGENT_EVM_PRIVATE_KEY,
]


@pytest.fixture(autouse=True)
def clean_agent_env(monkeypatch):
    """Keep the developer's own AGENT_* variables out of the tests."""
    for name in _AGENT_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def key_pair():
    return keydid.generate_did_keypair()


@pytest.fixture
def solana_wallet():
    return solana.generate_keypair()


@pytest.fixture
def evm_did():
    return evm.address_to_ethr_did(EVM_ADDRESS)


@pytest.fixture
def evm_private_key():
    return EVM_PRIVATE_KEY


@pytest.fixture
def evm_address():
    return EVM_ADDRESS
