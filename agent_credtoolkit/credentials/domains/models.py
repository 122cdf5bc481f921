"""Domain models for credential resolution."""
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class CredentialPair:
    """Identifier and secret used to authorize a request to a remote service."""
    identifier: str
    secret: str = field(repr=False)


def is_usable(value: Optional[str]) -> bool:
    """
    Check whether a raw credential value can be used.

    A value is usable when it is present and not blank after stripping
    leading/trailing whitespace. The stripped copy is only used for this
    check; callers keep the raw value.

    Args:
        value: Raw value, possibly None

    Returns:
        True if the value is a non-blank string
    """
    return isinstance(value, str) and value.strip() != ""
