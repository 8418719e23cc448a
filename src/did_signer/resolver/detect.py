"""Provider detection from DID strings."""

import logging

from ..core import evm, solana
from ..core.errors import UnsupportedDidFormatError
from ..core.models import Provider

logger = logging.getLogger(__name__)

_PREFIXES: list[tuple[str, Provider]] = [
    ("did:key:", Provider.KEY),
    ("did:pkh:solana:", Provider.SOLANA),
    ("did:ethr:", Provider.EVM),
    ("did:pkh:eip155:", Provider.EVM),
]


def detect_provider(did: str, strict: bool = False) -> Provider:
    """Decide which provider a DID (or raw address) belongs to.

    Known DID prefixes are checked first, then raw Solana and EVM address
    shapes. Anything else falls back to ``Provider.KEY``.

    Args:
        did: DID string or raw address
        strict: Raise instead of falling back for unrecognized input

    Returns:
        Detected provider

    Raises:
        UnsupportedDidFormatError: If ``strict`` and nothing matched
    """
    for prefix, provider in _PREFIXES:
        if did.startswith(prefix):
            return provider

    if solana.is_valid_address(did):
        return Provider.SOLANA
    if evm.is_valid_address(did):
        return Provider.EVM

    if strict:
        raise UnsupportedDidFormatError(f"Unrecognized DID or address: {did}")

    logger.warning("Unrecognized DID format, defaulting to provider 'key': %s", did)
    return Provider.KEY
