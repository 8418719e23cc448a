"""Tests for the MCP tool layer."""

import asyncio
import json
from importlib.metadata import version

import pytest

from did_signer import AgentSigner, CredentialResolver, SignerConfig
from did_signer.core import evm, solana
from did_signer.mcp_server import create_server
from did_signer.tools import SIGNER_TOOLS, TOOL_HANDLERS, handle_tool_call


@pytest.fixture
def solana_signer(solana_wallet):
    return AgentSigner(
        CredentialResolver(
            {"AGENT_DID": solana_wallet.did, "AGENT_PRIVATE_KEY": solana_wallet.keypair}
        )
    )


def test_every_tool_has_a_handler():
    assert {tool.name for tool in SIGNER_TOOLS} == set(TOOL_HANDLERS)


def test_create_did_signature_tool(solana_signer, solana_wallet):
    result = handle_tool_call(solana_signer, "create_did_signature", {"message": "hi"})

    assert result["success"] is True
    assert result["did"] == solana_wallet.did
    assert result["provider"] == "solana"
    assert result["message"] == "hi"
    assert solana.verify_signature("hi", result["signature"], solana_wallet.address)


def test_generate_auth_payload_tool(evm_did, evm_private_key, evm_address):
    signer = AgentSigner(
        CredentialResolver({"AGENT_EVM_DID": evm_did, "AGENT_EVM_PRIVATE_KEY": evm_private_key})
    )

    result = handle_tool_call(signer, "generate_auth_payload", {"provider": "evm"})

    assert result["success"] is True
    assert result["provider"] == "evm"
    message = f"{result['did']}:{result['timestamp']}:{result['nonce']}"
    assert evm.verify_signature(message, result["signature"], evm_address)


def test_tool_results_never_contain_private_key(solana_signer, solana_wallet):
    result = handle_tool_call(solana_signer, "generate_auth_payload", {})

    assert solana_wallet.keypair not in json.dumps(result)


def test_missing_credentials_reported():
    signer = AgentSigner(CredentialResolver({}))

    result = handle_tool_call(signer, "create_did_signature", {"message": "hi"})

    assert result["success"] is False
    assert result["error_type"] == "MissingCredentialsError"
    assert "No credentials found" in result["error"]


def test_unusable_evm_key_reported_as_format_error(evm_did):
    signer = AgentSigner(
        CredentialResolver({"AGENT_EVM_DID": evm_did, "AGENT_EVM_PRIVATE_KEY": "ff" * 32})
    )

    result = handle_tool_call(signer, "create_did_signature", {"message": "hi"})

    assert result["success"] is False
    assert result["error_type"] == "InvalidFormatError"


def test_hint_without_matching_credentials(solana_signer):
    result = handle_tool_call(solana_signer, "generate_auth_payload", {"provider": "key"})

    assert result["success"] is False
    assert result["error_type"] == "MissingCredentialsError"


def test_bad_arguments_reported(solana_signer):
    unknown = handle_tool_call(solana_signer, "delete_everything", {})
    assert unknown == {"success": False, "error": "Unknown tool: delete_everything"}

    bad_calls = [
        ("generate_auth_payload", {"provider": "bitcoin"}),
        ("create_did_signature", {}),
        ("create_did_signature", {"message": 42}),
        ("create_did_signature", {"message": "hi", "extra": True}),
    ]
    for name, arguments in bad_calls:
        result = handle_tool_call(solana_signer, name, arguments)
        assert result["success"] is False
        assert result["error_type"] == "ToolArgumentError"


def test_unexpected_errors_propagate(monkeypatch, solana_signer):
    """Only signer errors become tool results; bugs are not masked."""

    def broken(signer, provider=None):
        raise TypeError("internal bug")

    monkeypatch.setitem(TOOL_HANDLERS, "generate_auth_payload", broken)

    with pytest.raises(TypeError, match="internal bug"):
        handle_tool_call(solana_signer, "generate_auth_payload", {})


def test_installed_mcp_has_decorator_api():
    """The server registers handlers with the 1.x decorator API."""
    from mcp.server import Server

    assert int(version("mcp").split(".")[0]) < 2
    assert hasattr(Server, "list_tools") and hasattr(Server, "call_tool")


def test_server_lists_tools(solana_signer):
    """The MCP server is named from config and lists the signer tools."""
    from mcp.types import ListToolsRequest

    server = create_server(SignerConfig(name="test-signer"), solana_signer)
    assert server.name == "test-signer"

    handler = server.request_handlers[ListToolsRequest]
    response = asyncio.run(handler(ListToolsRequest(method="tools/list")))

    assert {tool.name for tool in response.root.tools} == set(TOOL_HANDLERS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
