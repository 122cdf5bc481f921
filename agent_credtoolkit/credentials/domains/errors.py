"""Exceptions raised while resolving credentials."""


class CredentialError(Exception):
    """Base exception for credential-related errors."""
    pass


class CredentialsUnavailable(CredentialError):
    """No valid credential pair could be produced by a credential source."""
    pass


class InvalidCredentialValue(CredentialError, ValueError):
    """A credential value failed validation when building a fixed-value source."""
    pass
