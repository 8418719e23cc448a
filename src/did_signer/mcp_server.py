"""MCP server exposing the signer over stdio.

stdio is the only transport: the server is never reachable over the network
and only signatures ever leave the process.

Tools:
- create_did_signature: Sign a message with the configured DID
- generate_auth_payload: Build a signed { did, timestamp, nonce, signature }
"""

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent

from .agent.signer import AgentSigner
from .config import SignerConfig
from .resolver.env import CredentialResolver
from .tools import SIGNER_TOOLS, handle_tool_call

logger = logging.getLogger(__name__)


def create_server(config: SignerConfig, signer: Optional[AgentSigner] = None) -> Server:
    """Build an MCP server with the signer tools registered.

    Args:
        config: Signer configuration
        signer: Signer to dispatch to (default: one reading ``os.environ``)
    """
    signer = signer or AgentSigner(
        CredentialResolver(), default_provider=config.default_provider
    )
    server = Server(config.name, version=config.version)

    @server.list_tools()
    async def list_tools():
        """List all available tools."""
        return SIGNER_TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Route tool calls to the signer."""
        result = handle_tool_call(signer, name, arguments)
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return server


async def serve(config: SignerConfig, signer: Optional[AgentSigner] = None) -> None:
    """Run the MCP server on stdio until the client disconnects."""
    server = create_server(config, signer)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Signer ready on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run(config: SignerConfig, signer: Optional[AgentSigner] = None) -> None:
    asyncio.run(serve(config, signer))
