"""Command line entry point.

    did-signer serve                  Run the MCP signer on stdio (default)
    did-signer generate [--provider]  Print a new DID keypair as .env lines
    did-signer sign MESSAGE           Sign a message with the configured DID
    did-signer auth-payload           Print a signed auth payload
"""

import argparse
import json
import logging
import sys
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from . import mcp_server
from .agent.signer import AgentSigner
from .config import SignerConfig, load_config
from .core import evm, keydid, solana
from .core.errors import ConfigurationError, DidSignerError
from .core.models import Provider
from .resolver.env import MISSING_CREDENTIALS_MESSAGE, CredentialResolver

logger = logging.getLogger(__name__)


def _configure_logging(config: SignerConfig) -> None:
    # stdout carries the MCP transport; logs go to stderr
    logging.basicConfig(
        level=config.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _generate(provider: Provider) -> str:
    # Only the env block goes to stdout so it can be redirected into .env
    if provider is Provider.SOLANA:
        wallet = solana.generate_keypair()
        print(f"Generated Solana wallet\nAddress: {wallet.address}", file=sys.stderr)
        return f"AGENT_SOLANA_DID={wallet.did}\nAGENT_SOLANA_PRIVATE_KEY={wallet.keypair}\n"

    if provider is Provider.EVM:
        wallet = evm.generate_wallet()
        print(f"Generated EVM wallet\nAddress: {wallet.address}", file=sys.stderr)
        return f"AGENT_EVM_DID={wallet.did}\nAGENT_EVM_PRIVATE_KEY={wallet.private_key}\n"

    pair = keydid.generate_did_keypair()
    print(f"Generated DID keypair\nDID: {pair.did}\nPublic key: {pair.public_key_hex}", file=sys.stderr)
    return keydid.format_did_env(pair)


def _serve(config: SignerConfig) -> int:
    logger.info("%s %s starting (local signing only, stdio transport)", config.name, config.version)

    resolver = CredentialResolver()
    credential = resolver.resolve(config.default_provider)
    if credential is None:
        logger.error(MISSING_CREDENTIALS_MESSAGE)
        logger.error("Example: AGENT_DID=did:key:z6Mk... AGENT_PRIVATE_KEY=...")
        return 1

    logger.info("Credentials loaded: provider=%s did=%s", credential.provider.value, credential.did)
    signer = AgentSigner(resolver, default_provider=config.default_provider)
    mcp_server.run(config, signer)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="did-signer", description="Local DID signer (keys never leave this process)"
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--env-file", help="Load environment variables from this file")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("serve", help="Run the MCP signer on stdio")

    generate = subparsers.add_parser("generate", help="Generate a DID keypair")
    generate.add_argument(
        "--provider", choices=[p.value for p in Provider], default=Provider.KEY.value
    )

    sign = subparsers.add_parser("sign", help="Sign a message")
    sign.add_argument("message")
    sign.add_argument("--provider", choices=[p.value for p in Provider])

    payload = subparsers.add_parser("auth-payload", help="Generate a signed auth payload")
    payload.add_argument("--provider", choices=[p.value for p in Provider])

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "generate":
        # Key generation needs neither config nor credentials
        sys.stdout.write(_generate(Provider(args.provider)))
        return 0

    load_dotenv(args.env_file or find_dotenv(usecwd=True))

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    _configure_logging(config)

    if args.command in (None, "serve"):
        return _serve(config)

    signer = AgentSigner(default_provider=config.default_provider)
    provider = Provider(args.provider) if args.provider else None
    try:
        if args.command == "sign":
            result = signer.create_did_signature(args.message, provider)
        else:
            result = signer.generate_auth_payload(provider)
    except DidSignerError as e:
        logger.error("%s", e)
        return 1

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
