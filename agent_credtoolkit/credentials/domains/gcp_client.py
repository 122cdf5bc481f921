"""GCP Secret Manager client wrapper and the credential source built on it."""
import os
import logging
from typing import Optional, Dict, Any

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import DefaultCredentialsError
from google.cloud import secretmanager

from .config_loader import load_config, get_secret_manager_settings, ConfigError
from .errors import CredentialsUnavailable
from .models import CredentialPair, is_usable

logger = logging.getLogger(__name__)

DEFAULT_IDENTIFIER_SECRET = "CREDTOOLKIT_IDENTIFIER"
DEFAULT_SECRET_SECRET = "CREDTOOLKIT_SECRET"


class GCPSecretClient:
    """Wrapper around GCP Secret Manager client."""

    def __init__(self, service_account_path: Optional[str] = None):
        self._client = None
        self.service_account_path = service_account_path

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            if self.service_account_path:
                logger.debug(f"Using service account file: {self.service_account_path}")
                self._client = secretmanager.SecretManagerServiceClient.from_service_account_file(
                    self.service_account_path
                )
            else:
                self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def fetch_secret(self, secret_name: str, project_id: str) -> Optional[str]:
        """
        Fetch the latest version of a secret from GCP Secret Manager.

        Args:
            secret_name: Name of the secret
            project_id: GCP project ID

        Returns:
            Secret value or None if fetch fails or the payload is not UTF-8
        """
        try:
            name = f"projects/{project_id}/secrets/{secret_name}/versions/latest"
            response = self.client.access_secret_version(request={"name": name})
            return response.payload.data.decode("UTF-8")
        except (GoogleAPIError, DefaultCredentialsError) as e:
            logger.warning(f"GCP fetch failed for {secret_name}: {e}")
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Secret {secret_name} is not valid UTF-8: {e}")
            return None


class SecretManagerCredentialSource:
    """Resolves the identifier and secret from two GCP Secret Manager secrets.

    Settings not passed to the constructor are read from the ``secret_manager``
    section of the config file. The project ID falls back to the GCP_PROJECT
    environment variable before the config file.

    The underlying GCPSecretClient is created on first resolve() and reused,
    so one source holds at most one gRPC channel.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        identifier_secret: Optional[str] = None,
        secret_secret: Optional[str] = None,
        service_account_path: Optional[str] = None,
        client: Optional[GCPSecretClient] = None,
    ):
        self.project_id = project_id
        self.identifier_secret = identifier_secret
        self.secret_secret = secret_secret
        self.service_account_path = service_account_path
        self._client = client
        self._owns_client = client is None

    def _settings(self) -> Dict[str, Any]:
        settings = {
            "project_id": self.project_id or os.getenv("GCP_PROJECT"),
            "identifier_secret": self.identifier_secret,
            "secret_secret": self.secret_secret,
            "service_account_path": self.service_account_path,
        }
        if all(settings[key] for key in ("project_id", "identifier_secret", "secret_secret")):
            return settings

        try:
            section = get_secret_manager_settings(load_config())
        except FileNotFoundError as e:
            logger.debug(f"No config file for secret_manager settings: {e}")
            section = {}
        except ConfigError as e:
            raise CredentialsUnavailable(f"Invalid secret_manager configuration: {e}") from e

        for key, value in settings.items():
            if not value:
                settings[key] = section.get(key)

        settings["identifier_secret"] = settings["identifier_secret"] or DEFAULT_IDENTIFIER_SECRET
        settings["secret_secret"] = settings["secret_secret"] or DEFAULT_SECRET_SECRET
        return settings

    def _secret_client(self, service_account_path: Optional[str]) -> GCPSecretClient:
        if not self._owns_client:
            return self._client
        if self._client is None or self._client.service_account_path != service_account_path:
            client = GCPSecretClient(service_account_path)
            try:
                client.client
            except (DefaultCredentialsError, ValueError, OSError) as e:
                raise CredentialsUnavailable(f"Unable to create Secret Manager client: {e}") from e
            if self._client is not None:
                self._client.client.transport.close()
            self._client = client
        return self._client

    def resolve(self) -> CredentialPair:
        settings = self._settings()
        project_id = settings["project_id"]
        if not project_id:
            raise CredentialsUnavailable(
                "GCP project ID not found. Set GCP_PROJECT or configure secret_manager.project_id"
            )

        client = self._secret_client(settings["service_account_path"])
        identifier = client.fetch_secret(settings["identifier_secret"], project_id)
        secret = client.fetch_secret(settings["secret_secret"], project_id)

        if not (is_usable(identifier) and is_usable(secret)):
            raise CredentialsUnavailable(
                f"Secrets {settings['identifier_secret']} and {settings['secret_secret']} "
                f"could not be read from project {project_id}"
            )
        logger.debug(f"Loaded credentials from GCP Secret Manager project {project_id}")
        return CredentialPair(identifier=identifier, secret=secret)
