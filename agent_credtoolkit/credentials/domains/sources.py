"""Credential sources: the resolve() capability and its built-in variants.

Every source exposes a single ``resolve()`` method that either returns a fully
populated CredentialPair or raises CredentialsUnavailable. Sources never return
a partial pair. Nothing here caches across calls; discovery sources read their
backing store each time ``resolve()`` runs.
"""
import os
import logging
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from .config_loader import ConfigError, load_config, get_profile
from .errors import CredentialsUnavailable, InvalidCredentialValue
from .models import CredentialPair, is_usable

logger = logging.getLogger(__name__)

IDENTIFIER_ENV_VAR = "CREDTOOLKIT_IDENTIFIER"
SECRET_ENV_VAR = "CREDTOOLKIT_SECRET"
PROFILE_ENV_VAR = "CREDTOOLKIT_PROFILE"
DEFAULT_PROFILE = "default"


@runtime_checkable
class CredentialSource(Protocol):
    """Protocol for anything that can produce a CredentialPair."""

    def resolve(self) -> CredentialPair:
        """
        Resolve a credential pair.

        Returns:
            CredentialPair which the caller can use to authorize a request

        Raises:
            CredentialsUnavailable: If no valid pair can be produced
        """
        ...


class StaticCredentialSource:
    """Fixed-value source that always returns the same pair.

    Values are stored exactly as given. Construction fails with
    InvalidCredentialValue if either value is not text or is blank.
    """

    def __init__(self, identifier: str, secret: str):
        for field_name, value in (("identifier", identifier), ("secret", secret)):
            if not isinstance(value, str):
                raise InvalidCredentialValue(
                    f"Credential {field_name} must be a string, got {type(value).__name__}"
                )
            if not is_usable(value):
                raise InvalidCredentialValue(f"Credential {field_name} cannot be empty")
        self._pair = CredentialPair(identifier=identifier, secret=secret)

    def resolve(self) -> CredentialPair:
        return self._pair

    def __repr__(self) -> str:
        return f"StaticCredentialSource(identifier={self._pair.identifier!r})"


class CredentialChain:
    """Tries an ordered list of sources and returns the first successful pair."""

    def __init__(self, sources: Sequence[CredentialSource]):
        if not sources:
            raise ValueError("CredentialChain requires at least one source")
        self.sources: List[CredentialSource] = list(sources)

    def resolve(self) -> CredentialPair:
        """
        Resolve credentials from the first source that can supply them.

        Sources that raise CredentialsUnavailable are skipped. Any other
        exception propagates unchanged.

        Raises:
            CredentialsUnavailable: If every source fails
        """
        failures = []
        for source in self.sources:
            try:
                pair = source.resolve()
            except CredentialsUnavailable as e:
                logger.debug(f"{type(source).__name__} could not resolve credentials: {e}")
                failures.append(f"{type(source).__name__}: {e}")
                continue
            logger.debug(f"Resolved credentials from {type(source).__name__}")
            return pair

        raise CredentialsUnavailable(
            "Unable to load credentials from any source in the chain:\n  "
            + "\n  ".join(failures)
        )

    def __repr__(self) -> str:
        names = ", ".join(type(source).__name__ for source in self.sources)
        return f"CredentialChain([{names}])"


class EnvironmentCredentialSource:
    """Reads the identifier and secret from environment variables."""

    def __init__(self, identifier_var: str = IDENTIFIER_ENV_VAR, secret_var: str = SECRET_ENV_VAR):
        self.identifier_var = identifier_var
        self.secret_var = secret_var

    def resolve(self) -> CredentialPair:
        identifier = os.getenv(self.identifier_var)
        secret = os.getenv(self.secret_var)

        if not (is_usable(identifier) and is_usable(secret)):
            raise CredentialsUnavailable(
                f"Environment variables {self.identifier_var} and {self.secret_var} must both be set and non-blank"
            )
        return CredentialPair(identifier=identifier, secret=secret)


class ConfigFileCredentialSource:
    """Reads a named credential profile from the YAML config file.

    The profile name comes from the constructor, then the CREDTOOLKIT_PROFILE
    environment variable, then ``default``.
    """

    def __init__(self, profile: Optional[str] = None):
        self._profile = profile

    @property
    def profile(self) -> str:
        return self._profile or os.getenv(PROFILE_ENV_VAR) or DEFAULT_PROFILE

    def resolve(self) -> CredentialPair:
        profile_name = self.profile
        try:
            profile = get_profile(load_config(), profile_name)
        except (ConfigError, FileNotFoundError) as e:
            raise CredentialsUnavailable(
                f"Unable to load credential profile '{profile_name}' from config: {e}"
            ) from e

        identifier = profile.get('identifier')
        secret = profile.get('secret')
        if not (is_usable(identifier) and is_usable(secret)):
            raise CredentialsUnavailable(
                f"Credential profile '{profile_name}' must define non-blank 'identifier' and 'secret'"
            )
        return CredentialPair(identifier=identifier, secret=secret)
