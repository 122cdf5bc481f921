"""Workflow for choosing between explicit credentials and a fallback source."""
import logging
from typing import Callable, Optional

from ..domains.errors import InvalidCredentialValue
from ..domains.models import CredentialPair, is_usable
from ..domains.sources import CredentialSource, StaticCredentialSource
from .default_chain import default_credential_chain

logger = logging.getLogger(__name__)

Accessor = Callable[[], Optional[str]]


def select(
    identifier_accessor: Accessor,
    secret_accessor: Accessor,
    fallback: CredentialSource,
) -> CredentialSource:
    """
    Pick the credential source a caller should use.

    Args:
        identifier_accessor: Zero-argument callable returning the identifier or None
        secret_accessor: Zero-argument callable returning the secret or None
        fallback: Source to use when the explicit values are not usable

    Returns:
        StaticCredentialSource over the raw values if both are usable,
        otherwise ``fallback`` itself

    Behavior:
        - Calls identifier_accessor then secret_accessor, exactly once each
        - Exceptions raised by an accessor propagate unchanged
        - Blank (whitespace-only) values count as missing
        - The usability check strips whitespace, the stored values do not
        - One usable value on its own is never combined with the fallback
        - The fallback is returned without calling its resolve()

    Raises:
        InvalidCredentialValue: If an accessor returns something other than str or None
    """
    identifier = identifier_accessor()
    secret = secret_accessor()

    for field_name, value in (("identifier", identifier), ("secret", secret)):
        if value is not None and not isinstance(value, str):
            raise InvalidCredentialValue(
                f"Credential {field_name} must be a string, got {type(value).__name__}"
            )

    if is_usable(identifier) and is_usable(secret):
        logger.debug("Using explicitly supplied credentials")
        return StaticCredentialSource(identifier, secret)

    if is_usable(identifier) or is_usable(secret):
        logger.warning("Only one of identifier/secret was supplied, ignoring it and using fallback source")
    else:
        logger.debug(f"No explicit credentials supplied, using {type(fallback).__name__}")
    return fallback


def provide(identifier_accessor: Accessor, secret_accessor: Accessor) -> CredentialSource:
    """Same as select(), with the default discovery chain as the fallback."""
    return select(identifier_accessor, secret_accessor, default_credential_chain())


def resolve_credentials(identifier: Optional[str] = None, secret: Optional[str] = None) -> CredentialPair:
    """
    Resolve credentials from explicit values or the default discovery chain.

    Raises:
        CredentialsUnavailable: If explicit values are unusable and discovery fails
    """
    return provide(lambda: identifier, lambda: secret).resolve()
