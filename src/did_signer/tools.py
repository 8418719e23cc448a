"""MCP tool definitions and handlers.

Handlers take an ``AgentSigner`` plus the tool arguments and return a
JSON-serializable dict. Private keys never appear in a result.
"""

import logging
from typing import Any, Callable, Optional

from mcp.types import Tool

from .agent.signer import AgentSigner
from .core.errors import DidSignerError, ToolArgumentError
from .core.models import Provider

logger = logging.getLogger(__name__)

_PROVIDER_PROPERTY = {
    "type": "string",
    "enum": [p.value for p in Provider],
    "description": "DID provider (optional, auto-detected from environment)",
}

SIGNER_TOOLS = [
    Tool(
        name="create_did_signature",
        description=(
            "Sign a message with your DID private key using credentials from "
            "environment variables. Returns a signature that can be sent to the "
            "remote service for authentication. Private keys never leave this tool."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "message": {
                    "type": "string",
                    "description": "Message to sign (typically an authentication challenge)",
                },
                "provider": _PROVIDER_PROPERTY,
            },
            "required": ["message"],
        },
    ),
    Tool(
        name="generate_auth_payload",
        description=(
            "Generate a complete authentication payload with signature using "
            "credentials from environment variables. Returns "
            "{ did, timestamp, nonce, signature } ready to send for authentication."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "provider": _PROVIDER_PROPERTY,
            },
        },
    ),
]


def _provider(value: Optional[str]) -> Optional[Provider]:
    return Provider(value) if value else None


def create_did_signature(
    signer: AgentSigner, message: str, provider: Optional[str] = None
) -> dict[str, Any]:
    """Sign ``message`` with the resolved credential."""
    result = signer.create_did_signature(message, _provider(provider))
    return {"success": True, **result.model_dump(mode="json")}


def generate_auth_payload(
    signer: AgentSigner, provider: Optional[str] = None
) -> dict[str, Any]:
    """Build a signed auth payload with the resolved credential."""
    payload = signer.generate_auth_payload(_provider(provider))
    return {
        "success": True,
        **payload.model_dump(mode="json"),
        "message": "Authentication payload ready. Send these values to the authenticate tool.",
    }


TOOL_HANDLERS: dict[str, Callable[..., dict[str, Any]]] = {
    "create_did_signature": create_did_signature,
    "generate_auth_payload": generate_auth_payload,
}

_TOOLS_BY_NAME = {tool.name: tool for tool in SIGNER_TOOLS}


def validate_arguments(tool: Tool, arguments: dict[str, Any]) -> None:
    """Check tool arguments against the tool's input schema.

    Only the subset of JSON Schema used by ``SIGNER_TOOLS`` is understood:
    required keys, string-typed properties and enums.

    Raises:
        ToolArgumentError: If an argument is missing, unknown or mistyped
    """
    schema = tool.inputSchema
    properties = schema.get("properties", {})

    unknown = sorted(set(arguments) - set(properties))
    if unknown:
        raise ToolArgumentError(f"Unknown argument(s) for {tool.name}: {', '.join(unknown)}")

    for key in schema.get("required", []):
        if key not in arguments:
            raise ToolArgumentError(f"Missing required argument for {tool.name}: {key}")

    for key, value in arguments.items():
        if value is None:
            continue
        spec = properties[key]
        if spec.get("type") == "string" and not isinstance(value, str):
            raise ToolArgumentError(f"Argument {key} must be a string")
        if "enum" in spec and value not in spec["enum"]:
            raise ToolArgumentError(
                f"Argument {key} must be one of {', '.join(spec['enum'])}, got {value!r}"
            )


def handle_tool_call(
    signer: AgentSigner, name: str, arguments: Optional[dict[str, Any]]
) -> dict[str, Any]:
    """Route a tool call and turn signer failures into ``success: false`` results.

    Exceptions outside the ``DidSignerError`` hierarchy propagate to the caller.
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return {"success": False, "error": f"Unknown tool: {name}"}

    arguments = arguments or {}
    try:
        validate_arguments(_TOOLS_BY_NAME[name], arguments)
        return handler(signer, **arguments)
    except DidSignerError as e:
        logger.error("Error in %s tool: %s", name, e)
        return {"success": False, "error": str(e), "error_type": type(e).__name__}
