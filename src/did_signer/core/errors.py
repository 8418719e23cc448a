"""Exception hierarchy for did-signer."""


class DidSignerError(Exception):
    """Base exception for all did-signer errors."""

    pass


# Credential errors
class CredentialError(DidSignerError):
    """Base exception for credential resolution errors."""

    pass


class MissingCredentialsError(CredentialError):
    """No environment variables satisfy the requested provider."""

    pass


# DID / key format errors
class DidFormatError(DidSignerError):
    """Base exception for malformed DIDs, addresses and keys."""

    pass


class InvalidAddressError(DidFormatError):
    """Address or public key is not valid for the provider."""

    pass


class InvalidFormatError(DidFormatError):
    """DID or encoded value does not match the expected grammar."""

    pass


class UnsupportedDidFormatError(InvalidFormatError):
    """DID does not belong to any supported method."""

    pass


class InvalidKeyLengthError(DidFormatError):
    """Decoded key material has the wrong length."""

    pass


# Configuration errors
class ConfigurationError(DidSignerError):
    """Signer configuration could not be loaded or is invalid."""

    pass


# Tool errors
class ToolArgumentError(DidSignerError):
    """Tool call arguments do not match the tool's input schema."""

    pass
